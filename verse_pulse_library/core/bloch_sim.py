import numpy as np
import torch


def rotate_magnetization_batch(M, omega, dt):
    """
    Rotates a batch of magnetization vectors about their effective fields.
    Uses Rodrigues' rotation formula.

    Args:
        M (torch.Tensor): Magnetization vectors [Mx, My, Mz], shape (B, 3).
        omega (torch.Tensor): Effective field vectors in rad/s, shape (B, 3).
        dt (float): Time step in seconds.

    Returns:
        torch.Tensor: Rotated magnetization, shape (B, 3).
    """
    if M.ndim != 2 or M.shape[1] != 3:
        raise ValueError("M must have shape (B, 3).")
    if omega.shape != M.shape:
        raise ValueError(f"omega shape {tuple(omega.shape)} does not match M shape {tuple(M.shape)}.")

    omega_norm = torch.linalg.norm(omega, dim=-1) + 1e-20
    dtheta = omega_norm * dt

    k = omega / omega_norm.unsqueeze(-1)
    cost = torch.cos(dtheta)
    sint = torch.sin(dtheta)
    kx, ky, kz = k[:, 0], k[:, 1], k[:, 2]

    mx, my, mz = M[:, 0], M[:, 1], M[:, 2]
    dot = kx*mx + ky*my + kz*mz
    crossx = ky*mz - kz*my
    crossy = kz*mx - kx*mz
    crossz = kx*my - ky*mx

    return torch.stack([
        mx*cost + crossx*sint + kx*dot*(1-cost),
        my*cost + crossy*sint + ky*dot*(1-cost),
        mz*cost + crossz*sint + kz*dot*(1-cost),
    ], dim=-1)


def simulate_b1_scaled_pulse(amplitude, phase_rad, dt_s, b1_hz, off_resonance_hz=0.0,
                             mx0=0.0, my0=0.0, mz0=1.0, device='cpu', dtype=torch.float64):
    """
    Simulate one normalized RF shape played at many peak-B1 values.

    Relaxation and gradients are ignored: the spin sits at the gradient
    isocenter and sees only the RF field plus a fixed off-resonance.

    Args:
        amplitude (array-like): RF amplitude shape, peak 1, shape (N,).
        phase_rad (array-like): RF phase in radians, shape (N,).
        dt_s (array-like or float): Duration of each sample in seconds, shape (N,) or scalar.
        b1_hz (array-like): Peak B1 values to simulate, in Hz, shape (B,).
        off_resonance_hz (float): Off-resonance of the spin (Hz), default 0.
        mx0, my0, mz0 (float): Initial magnetization components.
        device (str): PyTorch device.
        dtype (torch.dtype): Real dtype used for the simulation.

    Returns:
        torch.Tensor: Final magnetization for each B1 value, shape (B, 3).
    """
    device = torch.device(device)
    amplitude = torch.as_tensor(np.asarray(amplitude, dtype=float), dtype=dtype, device=device)
    phase_rad = torch.as_tensor(np.asarray(phase_rad, dtype=float), dtype=dtype, device=device)
    b1_hz = torch.as_tensor(np.asarray(b1_hz, dtype=float), dtype=dtype, device=device)
    N = amplitude.shape[0]

    if phase_rad.shape[0] != N:
        raise ValueError("amplitude and phase_rad must have the same number of samples.")
    dt_s = np.broadcast_to(np.asarray(dt_s, dtype=float), (N,))
    if np.any(dt_s < 0):
        raise ValueError("dt_s cannot be negative.")

    B = b1_hz.shape[0]
    M = torch.zeros(B, 3, dtype=dtype, device=device)
    M[:, 0] = mx0
    M[:, 1] = my0
    M[:, 2] = mz0

    wz = torch.full((B,), 2 * np.pi * off_resonance_hz, dtype=dtype, device=device)
    for t in range(N):
        w1 = 2 * np.pi * b1_hz * amplitude[t]
        omega = torch.stack([w1 * torch.cos(phase_rad[t]), w1 * torch.sin(phase_rad[t]), wz], dim=-1)
        M = rotate_magnetization_batch(M, omega, float(dt_s[t]))

    return M

# verse_pulse_library/examples/__init__.py
# Runnable scripts showing the library in use; see verse_sinc_example.py.

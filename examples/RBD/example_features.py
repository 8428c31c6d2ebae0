import numpy as np
from carlrun.RBD.features import extract_features

"""
This is an example on how to extract the dominant frequency and peak-to-peak amplitude that CARL classifies.
"""

fs = 100
rng = np.random.default_rng(0)
t = np.arange(20 * fs) / fs
vm = 1 + 1.5 * np.sin(2 * np.pi * 2.7 * t) + rng.normal(0, 0.05, len(t))

# Downsample to 16 Hz, lowpass at 8 Hz and use 1 s windows as in the classifier
wav_ridge, p2p_val = extract_features(vm, fs, 16, 8, 1)

for i, (freq, p2p) in enumerate(zip(wav_ridge, p2p_val)):
    print(f"{i:3d} s  dominant frequency {freq:5.2f} Hz  peak-to-peak {p2p:5.2f} g")

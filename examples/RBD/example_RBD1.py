import sys
import numpy as np
from carlrun.RBD.RBD1 import CarlRBD
from carlrun.utils.parameters import load_carl_parameters

"""
This is an example on how to use CARL to detect running bouts in resultant acceleration.
Pass the path of the fitted parameter file (.mat or .json) as the first argument.
"""

parameters = load_carl_parameters(sys.argv[1])

# 60 s of synthetic data at 100 Hz: rest, 30 s of running at 2.7 Hz, rest
fs = 100
rng = np.random.default_rng(0)
t = np.arange(30 * fs) / fs
rest = 1 + rng.normal(0, 0.01, 15 * fs)
run = 1 + 1.5 * np.sin(2 * np.pi * 2.7 * t) + rng.normal(0, 0.05, len(t))
vm = np.concatenate([rest, run, rest])

# Calling the class with the detect at once
RBs = CarlRBD(device_location="torso", continuity_s=5, parameters=parameters).detect(vm, sampling_rate_hz=fs)

print(RBs.rb_list_)

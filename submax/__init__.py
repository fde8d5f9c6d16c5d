"""
Submax Lab - physiological submax test analyzer.

Sub-packages:
- domain: sports, test types, protocol parameters, errors
- calculations: window search, lap segmentation, drift metrics, compliance
"""

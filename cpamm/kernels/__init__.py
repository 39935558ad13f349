"""
Kernel layer.

Deterministic, integer-only pricing and liquidity math used by the engines in
`cpamm.core`. Kernels never touch pool state; they take plain integers and
return typed results.
"""

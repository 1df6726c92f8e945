"""
mlsumcheck
==========

Multilinear extensions and the sum-check protocol over prime fields.

Modules:
    - common: field arithmetic, univariate polynomials, hypercube, errors
    - mle: multilinear extensions (interpolation, evaluation, partial evaluation)
    - protocol: sum-check provers, verifier, transcript and drivers
    - gkr: GKR over layered arithmetic circuits
    - config: protocol configuration presets

Quick Start:
    >>> from mlsumcheck.config import create_toy_config
    >>> from mlsumcheck.mle import MultilinearExtension
    >>> from mlsumcheck.protocol import SumCheckProver, run_sumcheck
    >>> config = create_toy_config(verbose=False)
    >>> f = MultilinearExtension(config.field, 3, [5, 2, 3, 0, 0, 0, 0, 1])
    >>> run_sumcheck(SumCheckProver(f, config)).verified
    True
"""

__version__ = "0.1.0"

from . import common
from . import mle
from . import config
from . import protocol
from . import gkr

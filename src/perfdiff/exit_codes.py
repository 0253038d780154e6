from __future__ import annotations

OK = 0
ERR_USAGE = 2
ERR_CONFIG = 10
ERR_INPUT = 11
ERR_VALIDATION = 12
ERR_REGRESSION = 20
ERR_INTERNAL = 99

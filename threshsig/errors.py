"""
Failure conditions of the threshold protocols.

All of them are local and recoverable by the caller: collect more shares,
exclude the party at `index`, or abort the session. Failed signature
verification is not an exception, the verify functions return False.
"""


class ThresholdError(Exception):
    pass


class InsufficientShares(ThresholdError):
    def __init__(self, have: int, need: int):
        super().__init__(f"need {need} distinct shares, got {have}")
        self.have = have
        self.need = need


class InvalidShare(ThresholdError):
    def __init__(self, index: int):
        super().__init__(f"share {index} failed verification")
        # index of the party that sent the bad share
        self.index = index


class DuplicateIndex(ThresholdError):
    def __init__(self, index: int):
        super().__init__(f"share index {index} presented more than once")
        self.index = index


class MalformedShare(ThresholdError):
    pass


class RandomnessFailure(ThresholdError):
    pass

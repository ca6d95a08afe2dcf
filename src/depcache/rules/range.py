import re
from enum import Enum

from .. import constants
from .version import is_exact_version


class Pinning(str, Enum):
    EXACT = "exact"
    BOUNDED = "bounded"
    LOOSE = "loose"
    EXTERNAL = "external"


class RangeRule:
    """
        Class RangeRule classifies how tightly an npm version range pins a dependency
    """

    EXTERNAL_PREFIXES = ("git+", "git:", "github:", "gitlab:", "bitbucket:", "file:", "link:", "http:", "https:", "npm:")
    HYPHEN_REGEX = re.compile(r"^\S+\s+-\s+\S+$")
    X_RANGE_REGEX = re.compile(r"^[=v]*(0|[1-9]\d*)(\.(\d+|[xX*]))?(\.(\d+|[xX*]))?$")
    OPERATOR_SPACE_REGEX = re.compile(r"([<>=~^]+)\s+")

    def __init__(self, range_str: str):
        """
        - loose: *, x, latest, "", >=1.0.0, >1.0.0
        - bounded: ^1.2.3, ~1.2.3, 1.x, 1.2, >=1.0.0 <2.0.0, 1.0.0 - 2.0.0
        - exact: 1.2.3, =1.2.3, v1.2.3
        - external: git, tarball, file and alias specifiers
        """
        self.range_str = (range_str or "").strip()
        self.pinning = self._classify()

    def _classify(self) -> Pinning:
        if self.range_str in constants.LOOSE_RANGES:
            return Pinning.LOOSE
        if self.range_str.startswith(self.EXTERNAL_PREFIXES) or "/" in self.range_str:
            return Pinning.EXTERNAL

        alternatives = [alt.strip() for alt in self.range_str.split("||")]
        kinds = [self._classify_set(alt) for alt in alternatives]
        if Pinning.LOOSE in kinds:
            return Pinning.LOOSE
        if kinds == [Pinning.EXACT]:
            return Pinning.EXACT
        return Pinning.BOUNDED

    def _classify_set(self, comparator_set: str) -> Pinning:
        if comparator_set in constants.LOOSE_RANGES:
            return Pinning.LOOSE
        if self.HYPHEN_REGEX.match(comparator_set):
            return Pinning.BOUNDED
        tokens = self.OPERATOR_SPACE_REGEX.sub(r"\1", comparator_set).split()
        if len(tokens) == 1 and is_exact_version(tokens[0]):
            return Pinning.EXACT
        if any(self._has_upper_bound(token) for token in tokens):
            return Pinning.BOUNDED
        return Pinning.LOOSE

    def _has_upper_bound(self, token: str) -> bool:
        if token.startswith(("<", "^", "~")):
            return True
        if token.startswith(">"):
            return False
        return bool(self.X_RANGE_REGEX.match(token))

    @property
    def is_loose(self) -> bool:
        return self.pinning is Pinning.LOOSE

    def __str__(self):
        return f"{self.range_str}"

    def __repr__(self):
        return f"RangeRule('{self.range_str}')"

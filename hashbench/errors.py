"""Exceptions raised by hashbench.

Everything the library raises derives from HashbenchError; only the command
line entry point turns them into messages and exit codes.
"""

from typing import Optional


class HashbenchError(Exception):
    """Base class for all fatal evaluation errors."""

    exit_code = 1


class CorpusDiscoveryError(HashbenchError):
    """No images, no attack directories, or a corpus directory is missing."""

    exit_code = 2


class HashComputationError(HashbenchError):
    """A single hash invocation failed; the whole run is aborted."""

    exit_code = 3

    def __init__(
        self,
        path: str,
        resolution: Optional[int] = None,
        fuzziness: Optional[int] = None,
        attack: Optional[str] = None,
        reason: str = "",
    ) -> None:
        self.path = path
        self.resolution = resolution
        self.fuzziness = fuzziness
        self.attack = attack
        self.reason = reason
        super().__init__(self._format())

    def _format(self) -> str:
        msg = f"Hash computation failed for {self.path}"
        if self.resolution is not None or self.fuzziness is not None:
            msg += f" (fuzziness={self.fuzziness}, resolution={self.resolution}"
            if self.attack is not None:
                msg += f", attack={self.attack}"
            msg += ")"
        elif self.attack is not None:
            msg += f" (attack={self.attack})"
        if self.reason:
            msg += f": {self.reason}"
        return msg


class ShapeMismatchError(HashbenchError):
    """A hash table is not populated exactly as its enumeration requires."""

    exit_code = 4

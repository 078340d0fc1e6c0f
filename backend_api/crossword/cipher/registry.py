from __future__ import annotations

from typing import Dict, List, Type, Union

from .engines import IndependentPolicy, LinkedPolicy

PolicyClass = Type[Union[LinkedPolicy, IndependentPolicy]]


# PUBLIC_INTERFACE
class PolicyRegistry:
    """Difficulty names accepted by play sessions.

    "easy"/"linked" share one answer per cipher number; "hard"/"independent"
    keep one answer per cell.
    """

    _policies: Dict[str, PolicyClass] = {
        "easy": LinkedPolicy,
        "linked": LinkedPolicy,
        "hard": IndependentPolicy,
        "independent": IndependentPolicy,
    }

    @classmethod
    def get(cls, difficulty: str) -> PolicyClass:
        """Raises KeyError for a difficulty nobody plays."""
        try:
            return cls._policies[(difficulty or "").strip().lower()]
        except KeyError:
            raise KeyError(
                f"Unknown difficulty {difficulty!r}; expected one of {', '.join(cls.names())}"
            ) from None

    @classmethod
    def names(cls) -> List[str]:
        return sorted(cls._policies)


# PUBLIC_INTERFACE
def get_policy(difficulty: str):
    """Fresh policy instance for a difficulty name, e.g. get_policy("hard")."""
    return PolicyRegistry.get(difficulty)()

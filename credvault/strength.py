"""
Password strength scoring and generation.

Scores are additive and capped at 100: length thresholds (8, 12, 16)
contribute 20/10/10, each character class present contributes 10, and
mixed case and letters-with-digits each add a 10 point bonus.
"""
import re
import string
import secrets

LOWERCASE = string.ascii_lowercase
UPPERCASE = string.ascii_uppercase
DIGITS = string.digits
SPECIAL = "!@#$%^&*()_+-=[]{}|;:,.<>?"

MAX_SCORE = 100
MIN_LENGTH = 8

_LENGTH_POINTS = ((8, 20), (12, 10), (16, 10))

_HAS_LOWER = re.compile(r"[a-z]")
_HAS_UPPER = re.compile(r"[A-Z]")
_HAS_DIGIT = re.compile(r"[0-9]")
_HAS_SPECIAL = re.compile(r"[^A-Za-z0-9]")

_LABELS = ((80, "Strong"), (60, "Good"), (40, "Fair"), (20, "Weak"))


class PasswordStrengthEngine:
    """Stateless scorer and generator."""

    def score(self, password: str) -> int:
        """Score a password from 0 to 100."""
        total = 0
        for threshold, points in _LENGTH_POINTS:
            if len(password) >= threshold:
                total += points

        lower = bool(_HAS_LOWER.search(password))
        upper = bool(_HAS_UPPER.search(password))
        digit = bool(_HAS_DIGIT.search(password))
        special = bool(_HAS_SPECIAL.search(password))
        total += 10 * sum((lower, upper, digit, special))

        if lower and upper:
            total += 10
        if digit and (lower or upper):
            total += 10
        return min(total, MAX_SCORE)

    def label(self, score: int) -> str:
        """Human label for a score, as shown by the strength meter."""
        for threshold, name in _LABELS:
            if score >= threshold:
                return name
        return "Very Weak"

    def requirements(self, password: str) -> dict[str, bool]:
        """Checklist of the individual policy requirements."""
        return {
            "min_length": len(password) >= MIN_LENGTH,
            "lowercase": bool(_HAS_LOWER.search(password)),
            "uppercase": bool(_HAS_UPPER.search(password)),
            "number": bool(_HAS_DIGIT.search(password)),
            "special": bool(_HAS_SPECIAL.search(password)),
        }

    def generate(self, length: int = 16, include_special: bool = True) -> str:
        """Generate a random password.

        At least one character of every requested class is included, so
        ``length`` must cover the number of classes.

        Raises:
            ValueError: If length is shorter than the number of classes.
        """
        classes = [LOWERCASE, UPPERCASE, DIGITS]
        if include_special:
            classes.append(SPECIAL)
        if length < len(classes):
            raise ValueError(
                f"length must be at least {len(classes)}, got {length}"
            )

        alphabet = "".join(classes)
        chars = [secrets.choice(group) for group in classes]
        chars.extend(secrets.choice(alphabet) for _ in range(length - len(classes)))
        secrets.SystemRandom().shuffle(chars)
        return "".join(chars)


_engine = PasswordStrengthEngine()

score = _engine.score
label = _engine.label
requirements = _engine.requirements
generate = _engine.generate

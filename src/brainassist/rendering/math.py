"""Terminal math rendering.

Hides how LaTeX formulas become something a terminal can show. Formulas
are converted to Unicode text (Greek letters, operators, super- and
subscripts, fractions and roots); anything unknown is passed through.
Until the renderer is loaded, formulas show a placeholder, and a formula
that fails to parse is shown as its raw source.
"""

GREEK = {
    "alpha": "α", "beta": "β", "gamma": "γ", "delta": "δ", "epsilon": "ε",
    "varepsilon": "ε", "zeta": "ζ", "eta": "η", "theta": "θ", "vartheta": "ϑ",
    "iota": "ι", "kappa": "κ", "lambda": "λ", "mu": "μ", "nu": "ν", "xi": "ξ",
    "pi": "π", "rho": "ρ", "sigma": "σ", "tau": "τ", "upsilon": "υ", "phi": "φ",
    "varphi": "φ", "chi": "χ", "psi": "ψ", "omega": "ω",
    "Gamma": "Γ", "Delta": "Δ", "Theta": "Θ", "Lambda": "Λ", "Xi": "Ξ", "Pi": "Π",
    "Sigma": "Σ", "Phi": "Φ", "Psi": "Ψ", "Omega": "Ω",
}

SYMBOLS = {
    "times": "×", "cdot": "·", "div": "÷", "pm": "±", "mp": "∓",
    "leq": "≤", "le": "≤", "geq": "≥", "ge": "≥", "neq": "≠", "ne": "≠",
    "approx": "≈", "equiv": "≡", "sim": "∼", "propto": "∝",
    "infty": "∞", "partial": "∂", "nabla": "∇",
    "int": "∫", "iint": "∬", "oint": "∮", "sum": "∑", "prod": "∏",
    "to": "→", "rightarrow": "→", "leftarrow": "←", "Rightarrow": "⇒",
    "Leftarrow": "⇐", "Leftrightarrow": "⇔", "iff": "⇔", "mapsto": "↦",
    "in": "∈", "notin": "∉", "subset": "⊂", "subseteq": "⊆", "cup": "∪",
    "cap": "∩", "emptyset": "∅", "forall": "∀", "exists": "∃", "neg": "¬",
    "land": "∧", "lor": "∨", "angle": "∠", "perp": "⊥", "parallel": "∥",
    "degree": "°", "circ": "∘", "ldots": "…", "cdots": "⋯", "dots": "…",
    "quad": "  ", "qquad": "    ",
}

SUPERSCRIPTS = str.maketrans(
    "0123456789+-=()niaxyz",
    "⁰¹²³⁴⁵⁶⁷⁸⁹⁺⁻⁼⁽⁾ⁿⁱᵃˣʸᶻ",
)
SUBSCRIPTS = str.maketrans(
    "0123456789+-=()aeioxnmkt",
    "₀₁₂₃₄₅₆₇₈₉₊₋₌₍₎ₐₑᵢₒₓₙₘₖₜ",
)
_SUPERSCRIPT_CHARS = frozenset("0123456789+-=()niaxyz")
_SUBSCRIPT_CHARS = frozenset("0123456789+-=()aeioxnmkt")

_ESCAPES = {",": " ", ";": " ", ":": " ", "!": "", "\\": " ", " ": " "}

# Commands whose argument is shown as-is
_TEXT_COMMANDS = frozenset({"text", "mathrm", "mathbf", "mathit", "textbf", "operatorname", "mathbb"})

PLACEHOLDER = "..."


class MathParseError(ValueError):
    """Raised when a formula has unbalanced braces or a dangling command."""


def _group(text: str) -> str:
    text = text.strip()
    if len(text) <= 1 or text.isalnum():
        return text
    return f"({text})"


def _script(text: str, marker: str) -> str:
    chars, table = (
        (_SUPERSCRIPT_CHARS, SUPERSCRIPTS) if marker == "^" else (_SUBSCRIPT_CHARS, SUBSCRIPTS)
    )
    if text and all(ch in chars for ch in text):
        return text.translate(table)
    return f"{marker}{_group(text)}"


class _Parser:
    """Single-pass recursive descent over a LaTeX fragment."""

    def __init__(self, source: str):
        self.source = source
        self.pos = 0

    def parse(self, in_group: bool = False) -> str:
        out: list[str] = []
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch == "}":
                if not in_group:
                    raise MathParseError(f"Unexpected '}}' at position {self.pos}")
                self.pos += 1
                return "".join(out)
            if ch == "{":
                self.pos += 1
                out.append(self.parse(in_group=True))
            elif ch == "\\":
                out.append(self._command())
            elif ch in "^_":
                self.pos += 1
                out.append(_script(self._argument(), ch))
            else:
                out.append(ch)
                self.pos += 1
        if in_group:
            raise MathParseError("Unbalanced '{'")
        return "".join(out)

    def _argument(self) -> str:
        while self.pos < len(self.source) and self.source[self.pos] == " ":
            self.pos += 1
        if self.pos >= len(self.source):
            raise MathParseError("Missing argument")
        ch = self.source[self.pos]
        if ch == "{":
            self.pos += 1
            return self.parse(in_group=True)
        if ch == "\\":
            return self._command()
        if ch == "}":
            raise MathParseError(f"Missing argument at position {self.pos}")
        self.pos += 1
        return ch

    def _command(self) -> str:
        self.pos += 1
        start = self.pos
        while self.pos < len(self.source) and self.source[self.pos].isalpha():
            self.pos += 1
        name = self.source[start:self.pos]

        if not name:
            if self.pos >= len(self.source):
                raise MathParseError("Trailing backslash")
            ch = self.source[self.pos]
            self.pos += 1
            return _ESCAPES.get(ch, ch)

        if name == "frac" or name == "dfrac":
            numerator = self._argument()
            denominator = self._argument()
            return f"{_group(numerator)}/{_group(denominator)}"
        if name == "sqrt":
            return "√" + _group(self._argument())
        if name in _TEXT_COMMANDS:
            return self._argument()
        if name in ("left", "right"):
            return ""
        if name in GREEK:
            return GREEK[name]
        return SYMBOLS.get(name, name)


def to_unicode(source: str) -> str:
    """Convert a LaTeX formula to Unicode text.

    Raises:
        MathParseError: If the formula cannot be parsed
    """
    return _Parser(source).parse().strip()


class MathRenderer:
    """Renders formulas once loaded; degrades to placeholder or raw source."""

    def __init__(self, ready: bool = False):
        self._ready = ready

    @property
    def ready(self) -> bool:
        return self._ready

    def load(self) -> None:
        """Mark the renderer ready."""
        self._ready = True

    def render(self, source: str, display: bool = False) -> str:
        """Render a formula.

        Args:
            source: LaTeX source
            display: Display (block) formula; inline formulas are kept on one line

        Returns:
            Unicode text, PLACEHOLDER before load, or source on parse error
        """
        if not self._ready:
            return PLACEHOLDER
        try:
            text = to_unicode(source)
        except MathParseError:
            return source
        return text if display else " ".join(text.split())

"""Formatting policy and generator options.

Neither reads global state: the numeric formatting below never consults the
process locale, and every renderer takes its policy/options as arguments.
"""

import math
import struct
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType

from dataclasses_json import DataClassJsonMixin

from .types import FLOATING_KINDS, NUMERIC_KINDS, WireFieldType, ensure_total

# Literal suffixes needed for the C# compiler to pick the right literal type
DEFAULT_LITERAL_SUFFIXES: Mapping[WireFieldType, str] = MappingProxyType(
    {
        WireFieldType.FLOAT: "F",
        WireFieldType.DOUBLE: "D",
        WireFieldType.INT32: "",
        WireFieldType.INT64: "L",
        WireFieldType.UINT32: "",
        WireFieldType.UINT64: "UL",
        WireFieldType.SINT32: "",
        WireFieldType.SINT64: "",
        WireFieldType.FIXED32: "",
        WireFieldType.FIXED64: "",
        WireFieldType.SFIXED32: "",
        WireFieldType.SFIXED64: "",
    }
)

ensure_total(DEFAULT_LITERAL_SUFFIXES, NUMERIC_KINDS, "DEFAULT_LITERAL_SUFFIXES")

# C# keyword for the floating types, used for the non-finite constants
_FLOAT_KEYWORDS = {
    WireFieldType.FLOAT: "float",
    WireFieldType.DOUBLE: "double",
}

ensure_total(_FLOAT_KEYWORDS, FLOATING_KINDS, "_FLOAT_KEYWORDS")

# Significant digits shown before switching to exponent notation, as in .NET "R"
_GENERAL_PRECISION = {
    WireFieldType.FLOAT: 7,
    WireFieldType.DOUBLE: 15,
}

ensure_total(_GENERAL_PRECISION, FLOATING_KINDS, "_GENERAL_PRECISION")


def to_single(value: float) -> float:
    """Round a double to the nearest 32-bit float."""
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _shortest_text(wire_type: WireFieldType, value: float) -> str:
    if wire_type != WireFieldType.FLOAT:
        return repr(value)
    for digits in range(1, 10):
        text = f"{value:.{digits - 1}e}"
        if to_single(float(text)) == value:
            return text
    return repr(value)


def format_invariant_float(wire_type: WireFieldType, value: float) -> str:
    """Shortest round-trip text of a finite value, laid out like .NET invariant culture.

    Whole numbers have no fraction part (2, not 2.0). Exponent notation is used
    once the exponent reaches the general precision (15 for double, 7 for float)
    or the number of significant digits, whichever is larger, and for values
    below 1E-04. Exponents carry a sign and at least two digits (1E+20, 1E-07).
    """
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"

    sign, digit_tuple, exponent = Decimal(_shortest_text(wire_type, value)).as_tuple()
    digits = "".join(map(str, digit_tuple)).rstrip("0")
    # Position of the decimal point relative to the first significant digit
    scale = len(digit_tuple) + exponent
    prefix = "-" if sign else ""

    if scale > max(len(digits), _GENERAL_PRECISION[wire_type]) or scale < -3:
        mantissa = digits[0] + (f".{digits[1:]}" if len(digits) > 1 else "")
        power = scale - 1
        return f"{prefix}{mantissa}E{'+' if power >= 0 else '-'}{abs(power):02d}"
    if scale <= 0:
        return f"{prefix}0.{'0' * -scale}{digits}"
    if scale >= len(digits):
        return prefix + digits + "0" * (scale - len(digits))
    return f"{prefix}{digits[:scale]}.{digits[scale:]}"


@dataclass(frozen=True)
class FormatPolicy:
    """Culture-invariant numeric literal formatting."""

    literal_suffixes: Mapping[WireFieldType, str] = field(
        default_factory=lambda: DEFAULT_LITERAL_SUFFIXES
    )

    def __post_init__(self) -> None:
        ensure_total(self.literal_suffixes, NUMERIC_KINDS, "FormatPolicy.literal_suffixes")

    def format_number(self, wire_type: WireFieldType, value: int | float) -> str:
        """Render a numeric default as a C# literal."""
        if wire_type in FLOATING_KINDS:
            value = float(value)
            if wire_type == WireFieldType.FLOAT:
                value = to_single(value)
            keyword = _FLOAT_KEYWORDS[wire_type]
            if math.isnan(value):
                return f"{keyword}.NaN"
            if math.isinf(value):
                return f"{keyword}.{'PositiveInfinity' if value > 0 else 'NegativeInfinity'}"
            text = format_invariant_float(wire_type, value)
        else:
            text = str(int(value))

        return text + self.literal_suffixes[wire_type]


INVARIANT = FormatPolicy()


@dataclass
class GeneratorOptions(DataClassJsonMixin):
    """Names of the runtime helpers the generated code refers to."""

    runtime_alias: str = "pb::"
    null_check: str = "ThrowHelper.ThrowIfNull"
    cls_compliant_attribute: str = "global::System.CLSCompliant"

    def runtime(self, name: str) -> str:
        """Qualify a runtime name with the runtime alias (pb::ByteString)."""
        return f"{self.runtime_alias}{name}"


DEFAULT_OPTIONS = GeneratorOptions()

"""ARB_internalformat_query2 information dumper.

Prints the outcome of calling glGetInternalformati*v with every combination
of pname/target/internalformat, one CSV line per combination:

    64 bit, GL_SAMPLES, GL_TEXTURE_2D_MULTISAMPLE, GL_RGBA8, "8,4,2,1"

Usage:
    python query2_info.py [-b] [-f] [-l] [-h] [-pname <pname>]

Filtering (-f) is based on the internalformat being supported for the target
(GL_INTERNALFORMAT_SUPPORTED), not on the pname/target/internalformat
combination being supported.
"""

import argparse
import ctypes
import os
import re
import sys
from collections.abc import Callable
from dataclasses import dataclass
from typing import NamedTuple, TextIO

EXTENSION_NAME = "GL_ARB_internalformat_query2"
DEFAULT_PARAMS_SIZE = 64
UNSET_VALUE = -1
WINDOW_WIDTH = 640
WINDOW_HEIGHT = 480


# ===--- CLI config contracts ---=== #


class GLEnum(NamedTuple):
    name: str
    value: int

    def __str__(self) -> str:
        return self.name


class QueryWidth(NamedTuple):
    bits: int
    ctype: type
    entry_point: str

    @property
    def label(self) -> str:
        return f"{self.bits} bit"


WIDTH_32 = QueryWidth(32, ctypes.c_int32, "glGetInternalformativ")
WIDTH_64 = QueryWidth(64, ctypes.c_int64, "glGetInternalformati64v")


@dataclass(frozen=True)
class QueryConfig:
    pname: GLEnum | None
    widths: tuple[QueryWidth, ...]
    filter_supported: bool
    list_pnames: bool = False


VALID_ERROR_CODES = {
    "INVALID_PNAME",
    "UNKNOWN_OPTION",
}


class ConfigError(Exception):
    def __init__(self, code: str, message: str, suggestion: str | None = None):
        if code not in VALID_ERROR_CODES:
            raise ValueError(f"Unknown config error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion


class ContextError(RuntimeError):
    """Raised when a GL context with the query2 entry points can't be set up."""


class _ArgumentParser(argparse.ArgumentParser):
    # Bad command lines are reported through ConfigError so main() can print
    # the usage text and exit the same way for every validation failure.
    def error(self, message: str):
        raise ConfigError(
            "UNKNOWN_OPTION",
            message,
            "Run with -h to see the accepted options.",
        )


def build_argument_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="query2-info",
        description=(
            "Print the outcome of glGetInternalformati*v for all the possible "
            "combinations of pname/target/internalformat."
        ),
        epilog=(
            "NOTE: the filtering is based on internalformat being supported or "
            "not, not on the combination of pname/target/internalformat being "
            "supported or not."
        ),
        allow_abbrev=False,
    )

    parser.add_argument(
        "-pname",
        "--pname",
        type=str,
        default=None,
        help="Prints info for only that pname (decimal, 0x hex or GL_ name).",
    )
    parser.add_argument(
        "-b",
        "--both",
        action="store_true",
        default=False,
        help="Prints info using (b)oth 32 and 64 bit queries. "
        "By default it only uses the 64-bit one.",
    )
    parser.add_argument(
        "-f",
        "--filter-supported",
        action="store_true",
        default=False,
        help="Prints info (f)iltering out the unsupported internalformat.",
    )
    parser.add_argument(
        "-l",
        "--list-pnames",
        action="store_true",
        default=False,
        help="Lists the accepted pnames and how their values are printed.",
    )

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_argument_parser()
    return parser.parse_args(argv)


_HEX_PNAME_RE = re.compile(r"0[xX]([0-9A-Fa-f]+)$")
# Leading digits only, trailing text ignored, like atoi().
_DECIMAL_PNAME_RE = re.compile(r"[+-]?[0-9]+")


def _pname_number(text: str) -> int | None:
    """Numeric value of a -pname argument, or None when it is a name."""
    match = _HEX_PNAME_RE.match(text)
    if match:
        return int(match.group(1), 16)
    match = _DECIMAL_PNAME_RE.match(text)
    if match:
        return int(match.group(0), 10)
    return None


def parse_pname(raw: str) -> GLEnum:
    """Resolve a -pname argument to one of VALID_PNAMES.

    Accepts a decimal value ("32937", read up to the first non-digit), a hex
    value ("0x80A9") or the enum name with or without the GL_ prefix
    ("GL_SAMPLES", "samples").
    """
    text = raw.strip()
    value = _pname_number(text)
    if value is None:
        name = text.upper()
        if not name.startswith("GL_"):
            name = f"GL_{name}"
        for pname in VALID_PNAMES:
            if pname.name == name:
                return pname
    else:
        for pname in VALID_PNAMES:
            if pname.value == value:
                return pname

    raise ConfigError(
        "INVALID_PNAME",
        f"Value `{raw}' is not a valid <pname> for GetInternalformati*v.",
        "Run with -l to list the accepted pnames.",
    )


def validate_config(args: argparse.Namespace) -> QueryConfig:
    pname = parse_pname(args.pname) if args.pname is not None else None
    widths = (WIDTH_32, WIDTH_64) if args.both else (WIDTH_64,)
    return QueryConfig(
        pname=pname,
        widths=widths,
        filter_supported=bool(args.filter_supported),
        list_pnames=bool(args.list_pnames),
    )


def build_config(argv: list[str] | None = None) -> QueryConfig:
    return validate_config(parse_args(argv))


# ===--- GL enum registry ---=== #

# Values from the Khronos GL registry. Several names share a value (GL_NONE,
# GL_FALSE and GL_NO_ERROR are all 0); the first name listed wins when a
# value is turned back into a name.
GL_ENUMS: dict[str, int] = {
    "GL_NONE": 0,
    "GL_FALSE": 0,
    "GL_TRUE": 1,
    # Errors
    "GL_NO_ERROR": 0,
    "GL_INVALID_ENUM": 0x0500,
    "GL_INVALID_VALUE": 0x0501,
    "GL_INVALID_OPERATION": 0x0502,
    "GL_STACK_OVERFLOW": 0x0503,
    "GL_STACK_UNDERFLOW": 0x0504,
    "GL_OUT_OF_MEMORY": 0x0505,
    "GL_INVALID_FRAMEBUFFER_OPERATION": 0x0506,
    "GL_CONTEXT_LOST": 0x0507,
    # Targets
    "GL_TEXTURE_1D": 0x0DE0,
    "GL_TEXTURE_1D_ARRAY": 0x8C18,
    "GL_TEXTURE_2D": 0x0DE1,
    "GL_TEXTURE_2D_ARRAY": 0x8C1A,
    "GL_TEXTURE_3D": 0x806F,
    "GL_TEXTURE_CUBE_MAP": 0x8513,
    "GL_TEXTURE_CUBE_MAP_ARRAY": 0x9009,
    "GL_TEXTURE_RECTANGLE": 0x84F5,
    "GL_TEXTURE_BUFFER": 0x8C2A,
    "GL_RENDERBUFFER": 0x8D41,
    "GL_TEXTURE_2D_MULTISAMPLE": 0x9100,
    "GL_TEXTURE_2D_MULTISAMPLE_ARRAY": 0x9102,
    # Pnames
    "GL_SAMPLES": 0x80A9,
    "GL_NUM_SAMPLE_COUNTS": 0x9380,
    "GL_INTERNALFORMAT_SUPPORTED": 0x826F,
    "GL_INTERNALFORMAT_PREFERRED": 0x8270,
    "GL_INTERNALFORMAT_RED_SIZE": 0x8271,
    "GL_INTERNALFORMAT_GREEN_SIZE": 0x8272,
    "GL_INTERNALFORMAT_BLUE_SIZE": 0x8273,
    "GL_INTERNALFORMAT_ALPHA_SIZE": 0x8274,
    "GL_INTERNALFORMAT_DEPTH_SIZE": 0x8275,
    "GL_INTERNALFORMAT_STENCIL_SIZE": 0x8276,
    "GL_INTERNALFORMAT_SHARED_SIZE": 0x8277,
    "GL_INTERNALFORMAT_RED_TYPE": 0x8278,
    "GL_INTERNALFORMAT_GREEN_TYPE": 0x8279,
    "GL_INTERNALFORMAT_BLUE_TYPE": 0x827A,
    "GL_INTERNALFORMAT_ALPHA_TYPE": 0x827B,
    "GL_INTERNALFORMAT_DEPTH_TYPE": 0x827C,
    "GL_INTERNALFORMAT_STENCIL_TYPE": 0x827D,
    "GL_MAX_WIDTH": 0x827E,
    "GL_MAX_HEIGHT": 0x827F,
    "GL_MAX_DEPTH": 0x8280,
    "GL_MAX_LAYERS": 0x8281,
    "GL_MAX_COMBINED_DIMENSIONS": 0x8282,
    "GL_COLOR_COMPONENTS": 0x8283,
    "GL_DEPTH_COMPONENTS": 0x8284,
    "GL_STENCIL_COMPONENTS": 0x8285,
    "GL_COLOR_RENDERABLE": 0x8286,
    "GL_DEPTH_RENDERABLE": 0x8287,
    "GL_STENCIL_RENDERABLE": 0x8288,
    "GL_FRAMEBUFFER_RENDERABLE": 0x8289,
    "GL_FRAMEBUFFER_RENDERABLE_LAYERED": 0x828A,
    "GL_FRAMEBUFFER_BLEND": 0x828B,
    "GL_READ_PIXELS": 0x828C,
    "GL_READ_PIXELS_FORMAT": 0x828D,
    "GL_READ_PIXELS_TYPE": 0x828E,
    "GL_TEXTURE_IMAGE_FORMAT": 0x828F,
    "GL_TEXTURE_IMAGE_TYPE": 0x8290,
    "GL_GET_TEXTURE_IMAGE_FORMAT": 0x8291,
    "GL_GET_TEXTURE_IMAGE_TYPE": 0x8292,
    "GL_MIPMAP": 0x8293,
    "GL_MANUAL_GENERATE_MIPMAP": 0x8294,
    "GL_AUTO_GENERATE_MIPMAP": 0x8295,
    "GL_COLOR_ENCODING": 0x8296,
    "GL_SRGB_READ": 0x8297,
    "GL_SRGB_WRITE": 0x8298,
    "GL_SRGB_DECODE_ARB": 0x8299,
    "GL_FILTER": 0x829A,
    "GL_VERTEX_TEXTURE": 0x829B,
    "GL_TESS_CONTROL_TEXTURE": 0x829C,
    "GL_TESS_EVALUATION_TEXTURE": 0x829D,
    "GL_GEOMETRY_TEXTURE": 0x829E,
    "GL_FRAGMENT_TEXTURE": 0x829F,
    "GL_COMPUTE_TEXTURE": 0x82A0,
    "GL_TEXTURE_SHADOW": 0x82A1,
    "GL_TEXTURE_GATHER": 0x82A2,
    "GL_TEXTURE_GATHER_SHADOW": 0x82A3,
    "GL_SHADER_IMAGE_LOAD": 0x82A4,
    "GL_SHADER_IMAGE_STORE": 0x82A5,
    "GL_SHADER_IMAGE_ATOMIC": 0x82A6,
    "GL_IMAGE_TEXEL_SIZE": 0x82A7,
    "GL_IMAGE_COMPATIBILITY_CLASS": 0x82A8,
    "GL_IMAGE_PIXEL_FORMAT": 0x82A9,
    "GL_IMAGE_PIXEL_TYPE": 0x82AA,
    "GL_IMAGE_FORMAT_COMPATIBILITY_TYPE": 0x90C7,
    "GL_SIMULTANEOUS_TEXTURE_AND_DEPTH_TEST": 0x82AC,
    "GL_SIMULTANEOUS_TEXTURE_AND_STENCIL_TEST": 0x82AD,
    "GL_SIMULTANEOUS_TEXTURE_AND_DEPTH_WRITE": 0x82AE,
    "GL_SIMULTANEOUS_TEXTURE_AND_STENCIL_WRITE": 0x82AF,
    "GL_TEXTURE_COMPRESSED": 0x86A1,
    "GL_TEXTURE_COMPRESSED_BLOCK_WIDTH": 0x82B1,
    "GL_TEXTURE_COMPRESSED_BLOCK_HEIGHT": 0x82B2,
    "GL_TEXTURE_COMPRESSED_BLOCK_SIZE": 0x82B3,
    "GL_CLEAR_BUFFER": 0x82B4,
    "GL_TEXTURE_VIEW": 0x82B5,
    "GL_VIEW_COMPATIBILITY_CLASS": 0x82B6,
    # Internal formats
    "GL_DEPTH_COMPONENT": 0x1902,
    "GL_DEPTH_STENCIL": 0x84F9,
    "GL_RED": 0x1903,
    "GL_RG": 0x8227,
    "GL_RGB": 0x1907,
    "GL_RGBA": 0x1908,
    "GL_R8": 0x8229,
    "GL_R8_SNORM": 0x8F94,
    "GL_R16": 0x822A,
    "GL_R16_SNORM": 0x8F98,
    "GL_RG8": 0x822B,
    "GL_RG8_SNORM": 0x8F95,
    "GL_RG16": 0x822C,
    "GL_RG16_SNORM": 0x8F99,
    "GL_R3_G3_B2": 0x2A10,
    "GL_RGB4": 0x804F,
    "GL_RGB5": 0x8050,
    "GL_RGB8": 0x8051,
    "GL_RGB8_SNORM": 0x8F96,
    "GL_RGB10": 0x8052,
    "GL_RGB12": 0x8053,
    "GL_RGB16": 0x8054,
    "GL_RGB16_SNORM": 0x8F9A,
    "GL_RGBA2": 0x8055,
    "GL_RGBA4": 0x8056,
    "GL_RGB5_A1": 0x8057,
    "GL_RGBA8": 0x8058,
    "GL_RGBA8_SNORM": 0x8F97,
    "GL_RGB10_A2": 0x8059,
    "GL_RGB10_A2UI": 0x906F,
    "GL_RGBA12": 0x805A,
    "GL_RGBA16": 0x805B,
    "GL_RGBA16_SNORM": 0x8F9B,
    "GL_SRGB8": 0x8C41,
    "GL_SRGB8_ALPHA8": 0x8C43,
    "GL_R16F": 0x822D,
    "GL_RG16F": 0x822F,
    "GL_RGB16F": 0x881B,
    "GL_RGBA16F": 0x881A,
    "GL_R32F": 0x822E,
    "GL_RG32F": 0x8230,
    "GL_RGB32F": 0x8815,
    "GL_RGBA32F": 0x8814,
    "GL_R11F_G11F_B10F": 0x8C3A,
    "GL_RGB9_E5": 0x8C3D,
    "GL_R8I": 0x8231,
    "GL_R8UI": 0x8232,
    "GL_R16I": 0x8233,
    "GL_R16UI": 0x8234,
    "GL_R32I": 0x8235,
    "GL_R32UI": 0x8236,
    "GL_RG8I": 0x8237,
    "GL_RG8UI": 0x8238,
    "GL_RG16I": 0x8239,
    "GL_RG16UI": 0x823A,
    "GL_RG32I": 0x823B,
    "GL_RG32UI": 0x823C,
    "GL_RGB8I": 0x8D8F,
    "GL_RGB8UI": 0x8D7D,
    "GL_RGB16I": 0x8D89,
    "GL_RGB16UI": 0x8D77,
    "GL_RGB32I": 0x8D83,
    "GL_RGB32UI": 0x8D71,
    "GL_RGBA8I": 0x8D8E,
    "GL_RGBA8UI": 0x8D7C,
    "GL_RGBA16I": 0x8D88,
    "GL_RGBA16UI": 0x8D76,
    "GL_RGBA32I": 0x8D82,
    "GL_RGBA32UI": 0x8D70,
    "GL_DEPTH_COMPONENT16": 0x81A5,
    "GL_DEPTH_COMPONENT24": 0x81A6,
    "GL_DEPTH_COMPONENT32": 0x81A7,
    "GL_DEPTH_COMPONENT32F": 0x8CAC,
    "GL_DEPTH24_STENCIL8": 0x88F0,
    "GL_DEPTH32F_STENCIL8": 0x8CAD,
    "GL_STENCIL_INDEX8": 0x8D48,
    "GL_COMPRESSED_RED": 0x8225,
    "GL_COMPRESSED_RG": 0x8226,
    "GL_COMPRESSED_RGB": 0x84ED,
    "GL_COMPRESSED_RGBA": 0x84EE,
    "GL_COMPRESSED_SRGB": 0x8C48,
    "GL_COMPRESSED_SRGB_ALPHA": 0x8C49,
    "GL_COMPRESSED_RED_RGTC1": 0x8DBB,
    "GL_COMPRESSED_SIGNED_RED_RGTC1": 0x8DBC,
    "GL_COMPRESSED_RG_RGTC2": 0x8DBD,
    "GL_COMPRESSED_SIGNED_RG_RGTC2": 0x8DBE,
    "GL_COMPRESSED_RGBA_BPTC_UNORM": 0x8E8C,
    "GL_COMPRESSED_SRGB_ALPHA_BPTC_UNORM": 0x8E8D,
    "GL_COMPRESSED_RGB_BPTC_SIGNED_FLOAT": 0x8E8E,
    "GL_COMPRESSED_RGB_BPTC_UNSIGNED_FLOAT": 0x8E8F,
    "GL_COMPRESSED_RGB_S3TC_DXT1_EXT": 0x83F0,
    "GL_COMPRESSED_RGBA_S3TC_DXT1_EXT": 0x83F1,
    "GL_COMPRESSED_RGBA_S3TC_DXT3_EXT": 0x83F2,
    "GL_COMPRESSED_RGBA_S3TC_DXT5_EXT": 0x83F3,
    # Query results
    "GL_FULL_SUPPORT": 0x82B7,
    "GL_CAVEAT_SUPPORT": 0x82B8,
    "GL_SIGNED_NORMALIZED": 0x8F9C,
    "GL_UNSIGNED_NORMALIZED": 0x8C17,
    "GL_LINEAR": 0x2601,
    "GL_SRGB": 0x8C40,
    "GL_IMAGE_FORMAT_COMPATIBILITY_BY_SIZE": 0x90C8,
    "GL_IMAGE_FORMAT_COMPATIBILITY_BY_CLASS": 0x90C9,
    # Pixel types
    "GL_BYTE": 0x1400,
    "GL_UNSIGNED_BYTE": 0x1401,
    "GL_SHORT": 0x1402,
    "GL_UNSIGNED_SHORT": 0x1403,
    "GL_INT": 0x1404,
    "GL_UNSIGNED_INT": 0x1405,
    "GL_FLOAT": 0x1406,
    "GL_HALF_FLOAT": 0x140B,
    "GL_UNSIGNED_BYTE_3_3_2": 0x8032,
    "GL_UNSIGNED_BYTE_2_3_3_REV": 0x8362,
    "GL_UNSIGNED_SHORT_5_6_5": 0x8363,
    "GL_UNSIGNED_SHORT_5_6_5_REV": 0x8364,
    "GL_UNSIGNED_SHORT_4_4_4_4": 0x8033,
    "GL_UNSIGNED_SHORT_4_4_4_4_REV": 0x8365,
    "GL_UNSIGNED_SHORT_5_5_5_1": 0x8034,
    "GL_UNSIGNED_SHORT_1_5_5_5_REV": 0x8366,
    "GL_UNSIGNED_INT_8_8_8_8": 0x8035,
    "GL_UNSIGNED_INT_8_8_8_8_REV": 0x8367,
    "GL_UNSIGNED_INT_10_10_10_2": 0x8036,
    "GL_UNSIGNED_INT_2_10_10_10_REV": 0x8368,
    "GL_UNSIGNED_INT_24_8": 0x84FA,
    "GL_UNSIGNED_INT_10F_11F_11F_REV": 0x8C3B,
    "GL_UNSIGNED_INT_5_9_9_9_REV": 0x8C3E,
    "GL_FLOAT_32_UNSIGNED_INT_24_8_REV": 0x8DAD,
    # Pixel formats
    "GL_STENCIL_INDEX": 0x1901,
    "GL_GREEN": 0x1904,
    "GL_BLUE": 0x1905,
    "GL_ALPHA": 0x1906,
    "GL_BGR": 0x80E0,
    "GL_BGRA": 0x80E1,
    "GL_RED_INTEGER": 0x8D94,
    "GL_GREEN_INTEGER": 0x8D95,
    "GL_BLUE_INTEGER": 0x8D96,
    "GL_RG_INTEGER": 0x8228,
    "GL_RGB_INTEGER": 0x8D98,
    "GL_RGBA_INTEGER": 0x8D99,
    "GL_BGR_INTEGER": 0x8D9A,
    "GL_BGRA_INTEGER": 0x8D9B,
    # Compatibility classes
    "GL_IMAGE_CLASS_4_X_32": 0x82B9,
    "GL_IMAGE_CLASS_2_X_32": 0x82BA,
    "GL_IMAGE_CLASS_1_X_32": 0x82BB,
    "GL_IMAGE_CLASS_4_X_16": 0x82BC,
    "GL_IMAGE_CLASS_2_X_16": 0x82BD,
    "GL_IMAGE_CLASS_1_X_16": 0x82BE,
    "GL_IMAGE_CLASS_4_X_8": 0x82BF,
    "GL_IMAGE_CLASS_2_X_8": 0x82C0,
    "GL_IMAGE_CLASS_1_X_8": 0x82C1,
    "GL_IMAGE_CLASS_11_11_10": 0x82C2,
    "GL_IMAGE_CLASS_10_10_10_2": 0x82C3,
    "GL_VIEW_CLASS_128_BITS": 0x82C4,
    "GL_VIEW_CLASS_96_BITS": 0x82C5,
    "GL_VIEW_CLASS_64_BITS": 0x82C6,
    "GL_VIEW_CLASS_48_BITS": 0x82C7,
    "GL_VIEW_CLASS_32_BITS": 0x82C8,
    "GL_VIEW_CLASS_24_BITS": 0x82C9,
    "GL_VIEW_CLASS_16_BITS": 0x82CA,
    "GL_VIEW_CLASS_8_BITS": 0x82CB,
    "GL_VIEW_CLASS_S3TC_DXT1_RGB": 0x82CC,
    "GL_VIEW_CLASS_S3TC_DXT1_RGBA": 0x82CD,
    "GL_VIEW_CLASS_S3TC_DXT3_RGBA": 0x82CE,
    "GL_VIEW_CLASS_S3TC_DXT5_RGBA": 0x82CF,
    "GL_VIEW_CLASS_RGTC1_RED": 0x82D0,
    "GL_VIEW_CLASS_RGTC2_RG": 0x82D1,
    "GL_VIEW_CLASS_BPTC_UNORM": 0x82D2,
    "GL_VIEW_CLASS_BPTC_FLOAT": 0x82D3,
}

UNRECOGNIZED_ENUM = "(unrecognized enum)"


def _build_enum_names(enums: dict[str, int]) -> dict[int, str]:
    names: dict[int, str] = {}
    for name, value in enums.items():
        names.setdefault(value, name)
    return names


_ENUM_NAMES = _build_enum_names(GL_ENUMS)


def gl_enum(name: str) -> GLEnum:
    return GLEnum(name, GL_ENUMS[name])


def _enums(*names: str) -> tuple[GLEnum, ...]:
    return tuple(gl_enum(name) for name in names)


def gl_enum_name(value: int) -> str:
    return _ENUM_NAMES.get(value, UNRECOGNIZED_ENUM)


GL_TRUE = GL_ENUMS["GL_TRUE"]
GL_NO_ERROR = GL_ENUMS["GL_NO_ERROR"]
GL_INTERNALFORMAT_SUPPORTED = gl_enum("GL_INTERNALFORMAT_SUPPORTED")
GL_NUM_SAMPLE_COUNTS = gl_enum("GL_NUM_SAMPLE_COUNTS")


# ===--- Dispatch tables ---=== #

VALID_TARGETS: tuple[GLEnum, ...] = _enums(
    "GL_TEXTURE_1D",
    "GL_TEXTURE_1D_ARRAY",
    "GL_TEXTURE_2D",
    "GL_TEXTURE_2D_ARRAY",
    "GL_TEXTURE_3D",
    "GL_TEXTURE_CUBE_MAP",
    "GL_TEXTURE_CUBE_MAP_ARRAY",
    "GL_TEXTURE_RECTANGLE",
    "GL_TEXTURE_BUFFER",
    "GL_RENDERBUFFER",
    "GL_TEXTURE_2D_MULTISAMPLE",
    "GL_TEXTURE_2D_MULTISAMPLE_ARRAY",
)

VALID_PNAMES: tuple[GLEnum, ...] = _enums(
    "GL_SAMPLES",
    "GL_NUM_SAMPLE_COUNTS",
    "GL_INTERNALFORMAT_SUPPORTED",
    "GL_INTERNALFORMAT_PREFERRED",
    "GL_INTERNALFORMAT_RED_SIZE",
    "GL_INTERNALFORMAT_GREEN_SIZE",
    "GL_INTERNALFORMAT_BLUE_SIZE",
    "GL_INTERNALFORMAT_ALPHA_SIZE",
    "GL_INTERNALFORMAT_DEPTH_SIZE",
    "GL_INTERNALFORMAT_STENCIL_SIZE",
    "GL_INTERNALFORMAT_SHARED_SIZE",
    "GL_INTERNALFORMAT_RED_TYPE",
    "GL_INTERNALFORMAT_GREEN_TYPE",
    "GL_INTERNALFORMAT_BLUE_TYPE",
    "GL_INTERNALFORMAT_ALPHA_TYPE",
    "GL_INTERNALFORMAT_DEPTH_TYPE",
    "GL_INTERNALFORMAT_STENCIL_TYPE",
    "GL_MAX_WIDTH",
    "GL_MAX_HEIGHT",
    "GL_MAX_DEPTH",
    "GL_MAX_LAYERS",
    "GL_MAX_COMBINED_DIMENSIONS",
    "GL_COLOR_COMPONENTS",
    "GL_DEPTH_COMPONENTS",
    "GL_STENCIL_COMPONENTS",
    "GL_COLOR_RENDERABLE",
    "GL_DEPTH_RENDERABLE",
    "GL_STENCIL_RENDERABLE",
    "GL_FRAMEBUFFER_RENDERABLE",
    "GL_FRAMEBUFFER_RENDERABLE_LAYERED",
    "GL_FRAMEBUFFER_BLEND",
    "GL_READ_PIXELS",
    "GL_READ_PIXELS_FORMAT",
    "GL_READ_PIXELS_TYPE",
    "GL_TEXTURE_IMAGE_FORMAT",
    "GL_TEXTURE_IMAGE_TYPE",
    "GL_GET_TEXTURE_IMAGE_FORMAT",
    "GL_GET_TEXTURE_IMAGE_TYPE",
    "GL_MIPMAP",
    "GL_MANUAL_GENERATE_MIPMAP",
    "GL_AUTO_GENERATE_MIPMAP",
    "GL_COLOR_ENCODING",
    "GL_SRGB_READ",
    "GL_SRGB_WRITE",
    "GL_SRGB_DECODE_ARB",
    "GL_FILTER",
    "GL_VERTEX_TEXTURE",
    "GL_TESS_CONTROL_TEXTURE",
    "GL_TESS_EVALUATION_TEXTURE",
    "GL_GEOMETRY_TEXTURE",
    "GL_FRAGMENT_TEXTURE",
    "GL_COMPUTE_TEXTURE",
    "GL_TEXTURE_SHADOW",
    "GL_TEXTURE_GATHER",
    "GL_TEXTURE_GATHER_SHADOW",
    "GL_SHADER_IMAGE_LOAD",
    "GL_SHADER_IMAGE_STORE",
    "GL_SHADER_IMAGE_ATOMIC",
    "GL_IMAGE_TEXEL_SIZE",
    "GL_IMAGE_COMPATIBILITY_CLASS",
    "GL_IMAGE_PIXEL_FORMAT",
    "GL_IMAGE_PIXEL_TYPE",
    "GL_IMAGE_FORMAT_COMPATIBILITY_TYPE",
    "GL_SIMULTANEOUS_TEXTURE_AND_DEPTH_TEST",
    "GL_SIMULTANEOUS_TEXTURE_AND_STENCIL_TEST",
    "GL_SIMULTANEOUS_TEXTURE_AND_DEPTH_WRITE",
    "GL_SIMULTANEOUS_TEXTURE_AND_STENCIL_WRITE",
    "GL_TEXTURE_COMPRESSED",
    "GL_TEXTURE_COMPRESSED_BLOCK_WIDTH",
    "GL_TEXTURE_COMPRESSED_BLOCK_HEIGHT",
    "GL_TEXTURE_COMPRESSED_BLOCK_SIZE",
    "GL_CLEAR_BUFFER",
    "GL_TEXTURE_VIEW",
    "GL_VIEW_COMPATIBILITY_CLASS",
)

# Formats that GL_INTERNALFORMAT_SUPPORTED must accept on GL 4.2 or later:
# sized formats (tables 3.12, 3.13 and 3.15), compressed formats (table 3.14),
# image unit formats (table 3.21) and the unsized base formats.
VALID_INTERNALFORMATS: tuple[GLEnum, ...] = _enums(
    # Unsized base formats
    "GL_DEPTH_COMPONENT",
    "GL_DEPTH_STENCIL",
    "GL_RED",
    "GL_RG",
    "GL_RGB",
    "GL_RGBA",
    # Sized color formats
    "GL_R8",
    "GL_R8_SNORM",
    "GL_R16",
    "GL_R16_SNORM",
    "GL_RG8",
    "GL_RG8_SNORM",
    "GL_RG16",
    "GL_RG16_SNORM",
    "GL_R3_G3_B2",
    "GL_RGB4",
    "GL_RGB5",
    "GL_RGB8",
    "GL_RGB8_SNORM",
    "GL_RGB10",
    "GL_RGB12",
    "GL_RGB16",
    "GL_RGB16_SNORM",
    "GL_RGBA2",
    "GL_RGBA4",
    "GL_RGB5_A1",
    "GL_RGBA8",
    "GL_RGBA8_SNORM",
    "GL_RGB10_A2",
    "GL_RGB10_A2UI",
    "GL_RGBA12",
    "GL_RGBA16",
    "GL_RGBA16_SNORM",
    "GL_SRGB8",
    "GL_SRGB8_ALPHA8",
    "GL_R16F",
    "GL_RG16F",
    "GL_RGB16F",
    "GL_RGBA16F",
    "GL_R32F",
    "GL_RG32F",
    "GL_RGB32F",
    "GL_RGBA32F",
    "GL_R11F_G11F_B10F",
    "GL_RGB9_E5",
    "GL_R8I",
    "GL_R8UI",
    "GL_R16I",
    "GL_R16UI",
    "GL_R32I",
    "GL_R32UI",
    "GL_RG8I",
    "GL_RG16I",
    "GL_RG16UI",
    "GL_RG32I",
    "GL_RG32UI",
    "GL_RGB8I",
    "GL_RGB8UI",
    "GL_RGB16I",
    "GL_RGB16UI",
    "GL_RGB32I",
    "GL_RGB32UI",
    "GL_RGBA8I",
    "GL_RGBA8UI",
    "GL_RGBA16I",
    "GL_RGBA16UI",
    "GL_RGBA32I",
    "GL_RGBA32UI",
    # Sized depth/stencil formats
    "GL_DEPTH_COMPONENT16",
    "GL_DEPTH_COMPONENT24",
    "GL_DEPTH_COMPONENT32",
    "GL_DEPTH_COMPONENT32F",
    "GL_DEPTH24_STENCIL8",
    "GL_DEPTH32F_STENCIL8",
    # Generic and specific compressed formats
    "GL_COMPRESSED_RED",
    "GL_COMPRESSED_RG",
    "GL_COMPRESSED_RGB",
    "GL_COMPRESSED_RGBA",
    "GL_COMPRESSED_SRGB",
    "GL_COMPRESSED_SRGB_ALPHA",
    "GL_COMPRESSED_RED_RGTC1",
    "GL_COMPRESSED_SIGNED_RED_RGTC1",
    "GL_COMPRESSED_RG_RGTC2",
    "GL_COMPRESSED_SIGNED_RG_RGTC2",
    "GL_COMPRESSED_RGBA_BPTC_UNORM",
    "GL_COMPRESSED_SRGB_ALPHA_BPTC_UNORM",
    "GL_COMPRESSED_RGB_BPTC_SIGNED_FLOAT",
    "GL_COMPRESSED_RGB_BPTC_UNSIGNED_FLOAT",
)


# ===--- Result classification ---=== #

RESULT_SAMPLE_COUNTS = "sample-counts"
RESULT_INTEGER = "integer"
RESULT_BOOLEAN = "boolean"
RESULT_ENUM_OR_NONE = "enum-or-none"
RESULT_ENUM = "enum"

# GL_SAMPLES returns as many values as GL_NUM_SAMPLE_COUNTS reports.
SAMPLE_COUNT_PNAMES = frozenset({"GL_SAMPLES"})

# Pnames returning a plain value instead of a GL enum.
INTEGER_PNAMES = frozenset(
    {
        "GL_NUM_SAMPLE_COUNTS",
        "GL_INTERNALFORMAT_RED_SIZE",
        "GL_INTERNALFORMAT_GREEN_SIZE",
        "GL_INTERNALFORMAT_BLUE_SIZE",
        "GL_INTERNALFORMAT_ALPHA_SIZE",
        "GL_INTERNALFORMAT_DEPTH_SIZE",
        "GL_INTERNALFORMAT_STENCIL_SIZE",
        "GL_INTERNALFORMAT_SHARED_SIZE",
        "GL_MAX_WIDTH",
        "GL_MAX_HEIGHT",
        "GL_MAX_DEPTH",
        "GL_MAX_LAYERS",
        "GL_MAX_COMBINED_DIMENSIONS",
        "GL_IMAGE_TEXEL_SIZE",
        "GL_TEXTURE_COMPRESSED_BLOCK_WIDTH",
        "GL_TEXTURE_COMPRESSED_BLOCK_HEIGHT",
        "GL_TEXTURE_COMPRESSED_BLOCK_SIZE",
    }
)

# GL_FALSE/GL_POINTS and GL_TRUE/GL_LINES share values, so these can't go
# through the generic name lookup.
BOOLEAN_PNAMES = frozenset(
    {
        "GL_INTERNALFORMAT_SUPPORTED",
        "GL_COLOR_COMPONENTS",
        "GL_DEPTH_COMPONENTS",
        "GL_STENCIL_COMPONENTS",
        "GL_COLOR_RENDERABLE",
        "GL_DEPTH_RENDERABLE",
        "GL_STENCIL_RENDERABLE",
        "GL_MIPMAP",
        "GL_TEXTURE_COMPRESSED",
    }
)

# GL_NONE has the same value as GL_FALSE and GL_POINTS.
NONE_CAPABLE_PNAMES = frozenset(
    {
        "GL_INTERNALFORMAT_PREFERRED",
        "GL_INTERNALFORMAT_RED_TYPE",
        "GL_INTERNALFORMAT_GREEN_TYPE",
        "GL_INTERNALFORMAT_BLUE_TYPE",
        "GL_INTERNALFORMAT_ALPHA_TYPE",
        "GL_INTERNALFORMAT_DEPTH_TYPE",
        "GL_INTERNALFORMAT_STENCIL_TYPE",
        "GL_FRAMEBUFFER_RENDERABLE",
        "GL_FRAMEBUFFER_RENDERABLE_LAYERED",
        "GL_FRAMEBUFFER_BLEND",
        "GL_READ_PIXELS",
        "GL_READ_PIXELS_FORMAT",
        "GL_READ_PIXELS_TYPE",
        "GL_TEXTURE_IMAGE_FORMAT",
        "GL_TEXTURE_IMAGE_TYPE",
        "GL_GET_TEXTURE_IMAGE_FORMAT",
        "GL_GET_TEXTURE_IMAGE_TYPE",
        "GL_MANUAL_GENERATE_MIPMAP",
        "GL_AUTO_GENERATE_MIPMAP",
        "GL_COLOR_ENCODING",
        "GL_SRGB_READ",
        "GL_SRGB_WRITE",
        "GL_SRGB_DECODE_ARB",
        "GL_FILTER",
        "GL_VERTEX_TEXTURE",
        "GL_TESS_CONTROL_TEXTURE",
        "GL_TESS_EVALUATION_TEXTURE",
        "GL_GEOMETRY_TEXTURE",
        "GL_FRAGMENT_TEXTURE",
        "GL_COMPUTE_TEXTURE",
        "GL_TEXTURE_SHADOW",
        "GL_TEXTURE_GATHER",
        "GL_TEXTURE_GATHER_SHADOW",
        "GL_SHADER_IMAGE_LOAD",
        "GL_SHADER_IMAGE_STORE",
        "GL_SHADER_IMAGE_ATOMIC",
        "GL_IMAGE_COMPATIBILITY_CLASS",
        "GL_IMAGE_PIXEL_FORMAT",
        "GL_IMAGE_PIXEL_TYPE",
        "GL_IMAGE_FORMAT_COMPATIBILITY_TYPE",
        "GL_SIMULTANEOUS_TEXTURE_AND_DEPTH_TEST",
        "GL_SIMULTANEOUS_TEXTURE_AND_STENCIL_TEST",
        "GL_SIMULTANEOUS_TEXTURE_AND_DEPTH_WRITE",
        "GL_SIMULTANEOUS_TEXTURE_AND_STENCIL_WRITE",
        "GL_CLEAR_BUFFER",
        "GL_TEXTURE_VIEW",
        "GL_VIEW_COMPATIBILITY_CLASS",
    }
)


def classify_pname(pname: GLEnum) -> str:
    if pname.name in SAMPLE_COUNT_PNAMES:
        return RESULT_SAMPLE_COUNTS
    if pname.name in INTEGER_PNAMES:
        return RESULT_INTEGER
    if pname.name in BOOLEAN_PNAMES:
        return RESULT_BOOLEAN
    if pname.name in NONE_CAPABLE_PNAMES:
        return RESULT_ENUM_OR_NONE
    return RESULT_ENUM


# ===--- GL driver ---=== #


class GLDriver:
    """Hidden glfw window plus the PyOpenGL query2 entry points.

    The rest of the module only uses entry_point(), get_error() and
    has_extension(), so any object with those three methods can stand in
    for a real context.
    """

    def __init__(self):
        self._glfw = None
        self._window = None
        self._gl = None

    def open(self) -> None:
        try:
            import glfw
        except ImportError as err:
            raise ContextError(f"glfw is not available: {err}") from err

        if not glfw.init():
            raise ContextError("Error initializing glfw.")
        glfw.window_hint(glfw.VISIBLE, glfw.FALSE)
        window = glfw.create_window(
            WINDOW_WIDTH, WINDOW_HEIGHT, "query2-info", None, None
        )
        if not window:
            glfw.terminate()
            raise ContextError("Error creating glfw window.")
        glfw.make_context_current(window)
        self._glfw = glfw
        self._window = window

        # Errors are polled with glGetError after each query, so PyOpenGL
        # must not raise them itself. Has to be set before OpenGL.GL loads.
        try:
            import OpenGL

            OpenGL.ERROR_CHECKING = False
            from OpenGL import GL
        except ImportError as err:
            self.close()
            raise ContextError(f"PyOpenGL is not available: {err}") from err
        self._gl = GL

    def close(self) -> None:
        if self._glfw is None:
            return
        if self._window is not None:
            self._glfw.destroy_window(self._window)
        self._glfw.terminate()
        self._glfw = None
        self._window = None
        self._gl = None

    def _require_open(self):
        if self._gl is None:
            raise ContextError("GL context is not open.")
        return self._gl

    def has_extension(self, name: str) -> bool:
        self._require_open()
        return bool(self._glfw.extension_supported(name))

    def entry_point(self, width: QueryWidth) -> Callable[..., object]:
        gl = self._require_open()
        function = getattr(gl, width.entry_point, None)
        # PyOpenGL hands out a falsy null function for unresolved symbols.
        if not function:
            raise ContextError(f"{width.entry_point} is not available.")
        return function

    def get_error(self) -> int:
        return int(self._require_open().glGetError())


def require_extension(driver) -> None:
    if not driver.has_extension(EXTENSION_NAME):
        raise ContextError(f"{EXTENSION_NAME} extension not found")


def check_gl_error(driver, where: str) -> bool:
    """Print every pending GL error to stderr. Returns True if any was found."""
    found = False
    error = driver.get_error()
    while error != GL_NO_ERROR:
        found = True
        print(f"gl_error in {where}: {gl_enum_name(error)}", file=sys.stderr)
        error = driver.get_error()
    return found


# ===--- Query descriptor ---=== #


class QueryData:
    """Result buffer and entry point for one query width.

    Hides the fact that there are two nearly identical query functions whose
    only difference is the element type of params. Switching the width
    reallocates the buffer and resolves the matching entry point.
    """

    def __init__(self, driver, width: QueryWidth, size: int = DEFAULT_PARAMS_SIZE):
        self.driver = driver
        self.size = size
        self.width = width
        self._params = None
        self._callback = None
        self._sync()

    def _sync(self) -> None:
        self._callback = self.driver.entry_point(self.width)
        self._params = (self.width.ctype * self.size)()

    def set_width(self, width: QueryWidth) -> None:
        if width == self.width and self._params is not None:
            return
        self.width = width
        self._sync()

    def release(self) -> None:
        self._params = None
        self._callback = None

    def execute(self, target: GLEnum, internalformat: GLEnum, pname: GLEnum) -> None:
        if self._params is None:
            raise RuntimeError("QueryData used after release()")
        self._callback(
            target.value, internalformat.value, pname.value, self.size, self._params
        )

    def _index_in_range(self, index: int) -> bool:
        return 0 <= index < self.size

    def value_at(self, index: int) -> int:
        if self._params is None or not self._index_in_range(index):
            print(
                f"ERROR: invalid index {index} while retrieving data from query buffer",
                file=sys.stderr,
            )
            return UNSET_VALUE
        return int(self._params[index])

    def set_value_at(self, index: int, value: int) -> None:
        if self._params is None or not self._index_in_range(index):
            print(
                f"ERROR: invalid index {index} while setting query buffer",
                file=sys.stderr,
            )
            return
        self._params[index] = value

    def check_supported(self, target: GLEnum, internalformat: GLEnum) -> bool:
        """Whether internalformat is supported for target.

        Only the width of this descriptor is used; its buffer is left alone.
        """
        local = QueryData(self.driver, self.width, 1)
        local.execute(target, internalformat, GL_INTERNALFORMAT_SUPPORTED)
        where = _describe_call(
            local.width, target, internalformat, GL_INTERNALFORMAT_SUPPORTED
        )
        check_gl_error(self.driver, where)
        result = local.value_at(0) == GL_TRUE
        local.release()
        return result


def _describe_call(
    width: QueryWidth, target: GLEnum, internalformat: GLEnum, pname: GLEnum
) -> str:
    return f"{width.entry_point}({target}, {internalformat}, {pname})"


# ===--- Result interpretation ---=== #


def get_num_sample_counts(driver, target: GLEnum, internalformat: GLEnum) -> int:
    """GL_NUM_SAMPLE_COUNTS for target/internalformat, -1 on GL error."""
    local = QueryData(driver, WIDTH_32, 1)
    local.execute(target, internalformat, GL_NUM_SAMPLE_COUNTS)
    if check_gl_error(
        driver, _describe_call(WIDTH_32, target, internalformat, GL_NUM_SAMPLE_COUNTS)
    ):
        result = UNSET_VALUE
    else:
        result = local.value_at(0)
    local.release()
    return result


def pname_value_count(
    driver, pname: GLEnum, target: GLEnum, internalformat: GLEnum
) -> int:
    if classify_pname(pname) == RESULT_SAMPLE_COUNTS:
        return get_num_sample_counts(driver, target, internalformat)
    return 1


def enum_value_name(pname: GLEnum, value: int) -> str:
    kind = classify_pname(pname)
    if kind == RESULT_BOOLEAN:
        return "GL_TRUE" if value else "GL_FALSE"
    if kind == RESULT_ENUM_OR_NONE and value == 0:
        return "GL_NONE"
    return gl_enum_name(value)


def format_value(
    query: QueryData, target: GLEnum, internalformat: GLEnum, pname: GLEnum
) -> str:
    """Return the quoted value column for an executed query.

    Values are always quoted because some pnames (GL_SAMPLES) return a
    comma separated list.
    """
    kind = classify_pname(pname)
    if kind in (RESULT_INTEGER, RESULT_SAMPLE_COUNTS):
        count = pname_value_count(query.driver, pname, target, internalformat)
        values = [str(query.value_at(i)) for i in range(max(count, 1))]
        return f'"{",".join(values)}"'
    return f'"{enum_value_name(pname, query.value_at(0))}"'


def format_case(
    query: QueryData, target: GLEnum, internalformat: GLEnum, pname: GLEnum
) -> str:
    return (
        f"{query.width.label}, {pname}, {target}, {internalformat}, "
        f"{format_value(query, target, internalformat, pname)}"
    )


def print_case(
    query: QueryData,
    target: GLEnum,
    internalformat: GLEnum,
    pname: GLEnum,
    out: TextIO | None = None,
) -> None:
    out = sys.stdout if out is None else out
    print(format_case(query, target, internalformat, pname), file=out)


# ===--- Dispatch ---=== #


def print_pname_values(
    query: QueryData,
    targets: tuple[GLEnum, ...],
    internalformats: tuple[GLEnum, ...],
    pname: GLEnum,
    filter_supported: bool = False,
    out: TextIO | None = None,
) -> None:
    """Print all the values for a given pname."""
    for target in targets:
        for internalformat in internalformats:
            if filter_supported and not query.check_supported(target, internalformat):
                continue

            # Some queries leave params untouched when unsupported.
            query.set_value_at(0, UNSET_VALUE)
            query.execute(target, internalformat, pname)
            check_gl_error(
                query.driver, _describe_call(query.width, target, internalformat, pname)
            )
            print_case(query, target, internalformat, pname, out)


def selected_pnames(config: QueryConfig) -> tuple[GLEnum, ...]:
    if config.pname is None:
        return VALID_PNAMES
    return tuple(pname for pname in VALID_PNAMES if pname == config.pname)


def run_queries(driver, config: QueryConfig, out: TextIO | None = None) -> None:
    """Walk pname -> width -> target -> internalformat and print each case."""
    query = QueryData(driver, config.widths[0])
    try:
        for pname in selected_pnames(config):
            for width in config.widths:
                query.set_width(width)
                print_pname_values(
                    query,
                    VALID_TARGETS,
                    VALID_INTERNALFORMATS,
                    pname,
                    config.filter_supported,
                    out,
                )
    finally:
        query.release()


def format_pname_table() -> str:
    """Return the --list-pnames output as a string."""
    lines = [f"{len(VALID_PNAMES)} pnames accepted by glGetInternalformati*v:", ""]
    name_width = max(len(pname.name) for pname in VALID_PNAMES)
    for pname in VALID_PNAMES:
        lines.append(
            f"  {pname.name.ljust(name_width)}  0x{pname.value:04X}  "
            f"{classify_pname(pname)}"
        )
    lines.append("")
    return "\n".join(lines)


# ===--- Main ---=== #


def main(argv: list[str] | None = None) -> None:
    try:
        config = build_config(argv)
    except ConfigError as err:
        print(f"Config error [{err.code}]: {err.message}")
        if err.suggestion:
            print(f"Hint: {err.suggestion}")
        build_argument_parser().print_help()
        raise SystemExit(0) from err

    if config.list_pnames:
        print(format_pname_table(), end="")
        return

    # The entry points only resolve once a context is current.
    driver = GLDriver()
    try:
        driver.open()
        require_extension(driver)
    except ContextError as err:
        driver.close()
        print(f"Error: {err}", file=sys.stderr)
        raise SystemExit(1) from err

    try:
        run_queries(driver, config)
        sys.stdout.flush()
    except BrokenPipeError:
        # The reader closed the pipe early (e.g. `| head`). Send the rest of
        # stdout to devnull so the flush at interpreter shutdown stays quiet.
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        raise SystemExit(0)
    except ContextError as err:
        print(f"Error: {err}", file=sys.stderr)
        raise SystemExit(1) from err
    finally:
        driver.close()


if __name__ == "__main__":
    main()

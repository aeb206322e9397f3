"""
Notation Tokenizer
----

Turns raw game text (PGN as exported by the hosting platforms, often with clock/eval markup) into an ordered list of move tokens
plus the optional starting position override found in the headers.

Tokenizing never raises: the worst case is zero tokens. Judging whether a token is a legal move is up to the Game.

Three flavours, used by the recovery tiers:
* `tokenize()`: the regular PGN reading.
* `clean_tokenize()`: additionally strips every kind of markup that is known to show up in exports.
* `manual_tokenize()`: does not look for header tags at all, everything after the first blank line is taken as movetext.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Mapping, Optional

from src.chess.fen import is_playable_fen
from src.core.models import MoveToken
from src.core.shared_types import Side

logger = logging.getLogger(__name__)

HEADER_TAG = re.compile(r'^\s*\[(?P<key>\w+)\s+"(?P<value>(?:[^"\\]|\\.)*)"\s*\]\s*$')
COMMENT = re.compile(r"\{[^}]*\}")
COMMENTARY_MARKER = re.compile(r"\[%[^\]]*\]")
ANNOTATION_GLYPHS = re.compile(r"[!?]+")
TRAILING_RESULT = re.compile(r"(?:^|\s)(?:1-0|0-1|1/2-1/2|\*)\s*$")
MOVE_NUMBER_LABEL = re.compile(r"^\d+\.+$")
FUSED_MOVE_NUMBER = re.compile(r"^\d+\.+(?=\S)")

# --- extra markup removed when cleaning aggressively ---
NUMERIC_ANNOTATION = re.compile(r"\$\d+")
REST_OF_LINE_COMMENT = re.compile(r";[^\n]*")
ESCAPE_LINE = re.compile(r"^%[^\n]*$", re.MULTILINE)
RESULT_ANYWHERE = re.compile(r"(?<!\S)(?:1-0|0-1|1/2-1/2|½-½|\*)(?!\S)")
EN_PASSANT_SUFFIX = re.compile(r"\s*e\.p\.", re.IGNORECASE)
CONTINUATION_DOTS = re.compile(r"(?<!\d)\.\.\.")
CASTLING_ZEROS = re.compile(r"(?<![\d-])0-0(-0)?(?![\d-])")
FIGURINES: dict[str, str] = {
    "♔": "K",
    "♚": "K",
    "♕": "Q",
    "♛": "Q",
    "♖": "R",
    "♜": "R",
    "♗": "B",
    "♝": "B",
    "♘": "N",
    "♞": "N",
    "♙": "",
    "♟": "",
}
UNICODE_DASHES = re.compile(r"[‐-―−]")


@dataclass(frozen=True)
class TokenizedGame:
    """Tokenizer output: starting position (None means the standard one), the tokens in encounter order and the header tags found."""

    initial_fen: Optional[str]
    tokens: list[MoveToken]
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def texts(self) -> list[str]:
        return [token.text for token in self.tokens]


# --- HEADERS ---
def read_headers(raw_text: str) -> dict[str, str]:
    """All header tags [Key "Value"] in the text, wherever they appear."""
    headers: dict[str, str] = {}
    for line in raw_text.splitlines():
        match = HEADER_TAG.match(line)
        if match:
            value = match.group("value").replace('\\"', '"').replace("\\\\", "\\")
            headers[match.group("key")] = value
    return headers


def resolve_initial_fen(
    headers: Mapping[str, str], header_overrides: Optional[Mapping[str, str]] = None
) -> Optional[str]:
    """
    Starting position override: the caller's headers win over the tags in the text.
    An override that cannot be replayed from is dropped, so the game is read from the standard starting position.
    """
    merged = {**headers, **(header_overrides or {})}
    fen = merged.get("FEN")
    if not fen:
        return None
    fen = " ".join(fen.split())
    if not is_playable_fen(fen):
        logger.warning("Ignoring unusable starting position override: %r", fen)
        return None
    return fen


# --- MOVETEXT CLEANING ---
def strip_variations(text: str) -> str:
    """Remove parenthesised variations, which may be nested. An unclosed '(' swallows the rest of the text."""
    kept: list[str] = []
    depth = 0
    for character in text:
        if character == "(":
            depth += 1
        elif character == ")":
            # a stray closing parenthesis is dropped as well
            depth = max(0, depth - 1)
        elif depth == 0:
            kept.append(character)
    return "".join(kept)


def strip_move_numbers(words: list[str]) -> list[str]:
    """Drop move number labels ("12.", "12...") and number prefixes fused to a move ("12.Nf3")."""
    moves: list[str] = []
    for word in words:
        if MOVE_NUMBER_LABEL.match(word):
            continue
        word = FUSED_MOVE_NUMBER.sub("", word)
        if word:
            moves.append(word)
    return moves


def clean_movetext(movetext: str) -> str:
    """Steps of the regular PGN reading, applied to the text without header lines."""
    text = COMMENT.sub(" ", movetext)
    text = strip_variations(text)
    text = COMMENTARY_MARKER.sub(" ", text)
    text = ANNOTATION_GLYPHS.sub("", text)
    text = TRAILING_RESULT.sub("", text)
    return " ".join(text.split())


def aggressive_clean_movetext(movetext: str) -> str:
    """Everything `clean_movetext()` removes plus every other markup found in the wild."""
    text = ESCAPE_LINE.sub(" ", movetext)
    text = REST_OF_LINE_COMMENT.sub(" ", text)
    # drop everything between braces, then any unbalanced brace that is left
    text = COMMENT.sub(" ", text)
    text = re.sub(r"\{[^}]*$", " ", text)
    text = text.replace("}", " ")
    text = COMMENTARY_MARKER.sub(" ", text)
    # any other bracketed text (ex. a header tag that ended up in the movetext)
    text = re.sub(r"\[[^\]]*\]", " ", text)
    text = strip_variations(text)
    text = NUMERIC_ANNOTATION.sub(" ", text)
    text = ANNOTATION_GLYPHS.sub("", text)
    text = EN_PASSANT_SUFFIX.sub("", text)
    text = UNICODE_DASHES.sub("-", text)
    for figurine, letter in FIGURINES.items():
        text = text.replace(figurine, letter)
    text = RESULT_ANYWHERE.sub(" ", text)
    text = CASTLING_ZEROS.sub(lambda m: "O-O-O" if m.group(1) else "O-O", text)
    text = CONTINUATION_DOTS.sub(" ", text)
    return " ".join(text.split())


def _header_free_lines(raw_text: str) -> str:
    return "\n".join(line for line in raw_text.splitlines() if not HEADER_TAG.match(line))


def _after_first_blank_line(raw_text: str) -> str:
    lines = raw_text.splitlines()
    for idx, line in enumerate(lines):
        if not line.strip():
            return "\n".join(lines[idx + 1 :])
    return raw_text


# --- TOKENIZING ---
def build_tokens(words: list[str], initial_fen: Optional[str]) -> list[MoveToken]:
    """Number the plies and assign the side to move, starting from the side to move in the initial position"""
    first_side = Side.BLACK if initial_fen and initial_fen.split()[1] == "b" else Side.WHITE
    second_side = Side.WHITE if first_side == Side.BLACK else Side.BLACK
    return [
        MoveToken(text=word, ply=idx + 1, side=first_side if idx % 2 == 0 else second_side)
        for idx, word in enumerate(words)
    ]


def _tokenized(
    movetext: str,
    headers: dict[str, str],
    header_overrides: Optional[Mapping[str, str]],
) -> TokenizedGame:
    initial_fen = resolve_initial_fen(headers, header_overrides)
    words = strip_move_numbers(movetext.split())
    tokens = build_tokens(words, initial_fen)
    logger.debug("Tokenized %d move tokens", len(tokens))
    return TokenizedGame(initial_fen, tokens, {**headers, **(header_overrides or {})})


def tokenize(
    raw_text: str, header_overrides: Optional[Mapping[str, str]] = None
) -> TokenizedGame:
    """
    Regular PGN reading
    ----

    1. discard header tag lines (keeping their values: the FEN tag is the starting position override)
    2. remove {comments}
    3. remove (variations), recursively
    4. strip annotation glyphs (!, ?, !?, ...) and [%clk ...] / [%eval ...] markers
    5. strip the game result at the very end
    6. split on whitespace and drop move number labels
    """
    headers = read_headers(raw_text)
    movetext = clean_movetext(_header_free_lines(raw_text))
    return _tokenized(movetext, headers, header_overrides)


def clean_tokenize(
    raw_text: str, header_overrides: Optional[Mapping[str, str]] = None
) -> TokenizedGame:
    """Same as `tokenize()`, but strips all markup in `aggressive_clean_movetext()`"""
    headers = read_headers(raw_text)
    movetext = aggressive_clean_movetext(_header_free_lines(raw_text))
    return _tokenized(movetext, headers, header_overrides)


def manual_tokenize(
    raw_text: str, header_overrides: Optional[Mapping[str, str]] = None
) -> TokenizedGame:
    """
    Ignore the header tags: every line after the first blank line is movetext (all lines if there is no blank line).
    (The tags are still scanned for the starting position + game metadata)
    """
    headers = read_headers(raw_text)
    movetext = aggressive_clean_movetext(_after_first_blank_line(raw_text))
    return _tokenized(movetext, headers, header_overrides)

"""Lexer for the block-structured configuration syntax."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import NotRequired, Optional, TypedDict

from confoverlay.logger import Logger
from confoverlay.pos import Pos
from confoverlay.utils import resolve_config


class TokenType(Enum):
    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()
    BOOLEAN = auto()
    EQUALS = auto()
    OPEN_BRACE = auto()
    CLOSE_BRACE = auto()
    EOF = auto()


@dataclass(slots=True)
class Token:
    type: TokenType
    value: str | int | float | bool | None
    start: Pos
    end: Pos


class LexerError(Exception):
    def __init__(self, message: str, pos: Pos):
        super().__init__(f"{message} at {pos.line}:{pos.column}")
        self.message = message
        self.pos = pos


class LexerConfig(TypedDict):
    enable_logger: NotRequired[bool]


class LexerConfigRequired(TypedDict):
    enable_logger: bool


DEFAULT_CONFIG: LexerConfigRequired = {"enable_logger": False}

_IDENTIFIER_CHARS = {"_", "-"}


class ConfigLexer:
    def __init__(self, text: str, config: Optional[LexerConfig] = None):
        self.text = text
        self.config = resolve_config(config or {}, DEFAULT_CONFIG)
        self.logger = Logger(config={"name": "confoverlay.lexer", "is_enabled": self.config["enable_logger"]}).logger
        self.tokens: list[Token] = []
        self._pos = 0
        self._line = 1
        self._column = 1

    def tokenize(self) -> list[Token]:
        self.logger.info("Starting tokenization")
        while not self._is_eof:
            char = self._peek()
            if char.isspace():
                self._consume_whitespace()
                continue
            if char == "#" or (char == "/" and self._peek(1) == "/"):
                self._consume_comment()
                continue
            if char in "{}":
                self._emit_single(TokenType.OPEN_BRACE if char == "{" else TokenType.CLOSE_BRACE)
                continue
            if char == "=":
                self._emit_single(TokenType.EQUALS)
                continue
            if char == '"':
                self._emit_string()
                continue
            if char.isdigit() or (char == "-" and self._peek(1).isdigit()):
                self._emit_number()
                continue
            if char.isalpha() or char == "_":
                self._emit_identifier()
                continue
            raise LexerError(f"Unexpected character {char!r}", self._here)

        self.tokens.append(Token(TokenType.EOF, None, self._here, self._here))
        self.logger.info("Tokenization complete")
        return self.tokens

    def _consume_whitespace(self) -> None:
        while not self._is_eof and self._peek().isspace():
            self._advance()

    def _consume_comment(self) -> None:
        while not self._is_eof and self._peek() != "\n":
            self._advance()

    def _emit_single(self, token_type: TokenType) -> None:
        start = self._here
        char = self._advance()
        self._add_token(token_type, char, start)

    def _emit_string(self) -> None:
        start = self._here
        self._advance()
        buffer: list[str] = []
        while not self._is_eof:
            char = self._peek()
            if char == "\n":
                break
            if char == '"':
                self._advance()
                self._add_token(TokenType.STRING, "".join(buffer), start)
                return
            if char == "\\":
                self._advance()
                if self._is_eof:
                    break
                escaped = self._advance()
                buffer.append({"n": "\n", "t": "\t", "r": "\r"}.get(escaped, escaped))
            else:
                buffer.append(self._advance())
        raise LexerError("Unterminated string", start)

    def _emit_number(self) -> None:
        start = self._here
        buffer = [self._advance()]
        while not self._is_eof and (self._peek().isdigit() or self._peek() == "."):
            buffer.append(self._advance())
        text = "".join(buffer)
        try:
            value: int | float = float(text) if "." in text else int(text)
        except ValueError:
            raise LexerError(f"Invalid number {text!r}", start) from None
        self._add_token(TokenType.NUMBER, value, start)

    def _emit_identifier(self) -> None:
        start = self._here
        buffer = [self._advance()]
        while not self._is_eof and (self._peek().isalnum() or self._peek() in _IDENTIFIER_CHARS):
            buffer.append(self._advance())
        word = "".join(buffer)
        if word in {"true", "false"}:
            self._add_token(TokenType.BOOLEAN, word == "true", start)
            return
        self._add_token(TokenType.IDENTIFIER, word, start)

    # Helpers -----------------------------------------------------------------
    def _add_token(self, token_type: TokenType, value: str | int | float | bool | None, start: Pos) -> None:
        self.logger.debug(f"Adding token {token_type} with value {value!r} at {start.line}:{start.column}")
        self.tokens.append(Token(token_type, value, start, self._here))

    @property
    def _here(self) -> Pos:
        return Pos(line=self._line, column=self._column, byte=self._pos)

    @property
    def _is_eof(self) -> bool:
        return self._pos >= len(self.text)

    def _peek(self, ahead: int = 0) -> str:
        index = self._pos + ahead
        if index >= len(self.text):
            return "\0"
        return self.text[index]

    def _advance(self) -> str:
        char = self.text[self._pos]
        self._pos += 1
        if char == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return char


__all__ = ["ConfigLexer", "LexerConfig", "LexerError", "Token", "TokenType"]

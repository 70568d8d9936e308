"""TCP segment header: parsing, serialization and display."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from .parser import NetParser, ParseError, ParseResult, pack_u8, pack_u16, pack_u32
from .wrapping_integers import WrappingInt32

_URG = 0b0010_0000
_ACK = 0b0001_0000
_PSH = 0b0000_1000
_RST = 0b0000_0100
_SYN = 0b0000_0010
_FIN = 0b0000_0001


def _flag(value: bool) -> str:
    return "true" if value else "false"


@dataclass(eq=False)
class TCPHeader:
    """The fixed part of a TCP header; options are skipped, not kept.

    Equality ignores the checksum and the ports.
    """

    LENGTH: ClassVar[int] = 20

    sport: int = 0
    dport: int = 0
    seqno: WrappingInt32 = field(default_factory=lambda: WrappingInt32(0))
    ackno: WrappingInt32 = field(default_factory=lambda: WrappingInt32(0))
    doff: int = LENGTH // 4
    urg: bool = False
    ack: bool = False
    psh: bool = False
    rst: bool = False
    syn: bool = False
    fin: bool = False
    win: int = 0
    cksum: int = 0
    uptr: int = 0

    @classmethod
    def parse(cls, parser: NetParser) -> "TCPHeader":
        """Read a header from ``parser``, skipping any options.

        Raises ParseError if the data offset is too small or data runs out.
        """
        if not isinstance(parser, NetParser):
            parser = NetParser(parser)
        sport = parser.u16()
        dport = parser.u16()
        seqno = WrappingInt32(parser.u32())
        ackno = WrappingInt32(parser.u32())
        doff = parser.u8() >> 4
        flags = parser.u8()
        win = parser.u16()
        cksum = parser.u16()
        uptr = parser.u16()

        if doff < 5:
            raise ParseError(ParseResult.HEADER_TOO_SHORT)

        parser.remove_prefix(doff * 4 - cls.LENGTH)
        if parser.error:
            raise ParseError(parser.result)

        return cls(
            sport=sport,
            dport=dport,
            seqno=seqno,
            ackno=ackno,
            doff=doff,
            urg=bool(flags & _URG),
            ack=bool(flags & _ACK),
            psh=bool(flags & _PSH),
            rst=bool(flags & _RST),
            syn=bool(flags & _SYN),
            fin=bool(flags & _FIN),
            win=win,
            cksum=cksum,
            uptr=uptr,
        )

    @property
    def flags_byte(self) -> int:
        """The flag bits packed as they appear on the wire."""
        return (
            (_URG if self.urg else 0)
            | (_ACK if self.ack else 0)
            | (_PSH if self.psh else 0)
            | (_RST if self.rst else 0)
            | (_SYN if self.syn else 0)
            | (_FIN if self.fin else 0)
        )

    def serialize(self) -> bytes:
        """Encode the header, padded to ``4 * doff`` bytes; the checksum is not recomputed."""
        if self.doff < 5:
            raise ValueError("TCP header too short")
        raw = b"".join(
            (
                pack_u16(self.sport),
                pack_u16(self.dport),
                pack_u32(self.seqno.raw_value),
                pack_u32(self.ackno.raw_value),
                pack_u8(self.doff << 4),
                pack_u8(self.flags_byte),
                pack_u16(self.win),
                pack_u16(self.cksum),
                pack_u16(self.uptr),
            )
        )
        return raw.ljust(4 * self.doff, b"\0")

    def to_string(self) -> str:
        """Return every field in a human-readable, hexadecimal form."""
        return (
            f"TCP source port: {self.sport:x}\n"
            f"TCP dest port: {self.dport:x}\n"
            f"TCP seqno: {self.seqno.raw_value:x}\n"
            f"TCP ackno: {self.ackno.raw_value:x}\n"
            f"TCP doff: {self.doff:x}\n"
            f"Flags: urg: {_flag(self.urg)} ack: {_flag(self.ack)} psh: {_flag(self.psh)}"
            f" rst: {_flag(self.rst)} syn: {_flag(self.syn)} fin: {_flag(self.fin)}\n"
            f"TCP winsize: {self.win:x}\n"
            f"TCP cksum: {self.cksum:x}\n"
            f"TCP uptr: {self.uptr:x}\n"
        )

    def summary(self) -> str:
        """Return a one-line summary of the flags, numbers and window."""
        flags = (
            ("S" if self.syn else "")
            + ("A" if self.ack else "")
            + ("R" if self.rst else "")
            + ("F" if self.fin else "")
        )
        return f"Header(flags={flags},seqno={self.seqno},ack={self.ackno},win={self.win})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TCPHeader):
            return NotImplemented
        return (
            self.seqno == other.seqno
            and self.ackno == other.ackno
            and self.doff == other.doff
            and self.urg == other.urg
            and self.ack == other.ack
            and self.psh == other.psh
            and self.rst == other.rst
            and self.syn == other.syn
            and self.fin == other.fin
            and self.win == other.win
            and self.uptr == other.uptr
        )

    __hash__ = None  # type: ignore[assignment]
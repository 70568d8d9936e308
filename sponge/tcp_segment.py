"""TCP segment: a header plus a payload, with checksum handling."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field

from .buffer import Buffer, BufferList
from .parser import NetParser, ParseError, ParseResult
from .tcp_header import TCPHeader
from .util import InternetChecksum


@dataclass
class TCPSegment:
    """A TCP header and the payload that follows it."""

    header: TCPHeader = field(default_factory=TCPHeader)
    payload: Buffer = field(default_factory=Buffer)

    def __post_init__(self) -> None:
        if not isinstance(self.payload, Buffer):
            self.payload = Buffer(self.payload)

    @classmethod
    def parse(cls, buffer, datagram_layer_checksum: int = 0) -> "TCPSegment":
        """Parse a segment, verifying the checksum against the lower layer's pseudo-sum.

        Raises ParseError on a bad checksum or a malformed header.
        """
        data = Buffer(buffer) if not isinstance(buffer, Buffer) else buffer
        check = InternetChecksum(datagram_layer_checksum)
        check.add(data)
        if check.value():
            raise ParseError(ParseResult.BAD_CHECKSUM)

        parser = NetParser(data)
        try:
            header = TCPHeader.parse(parser)
        except ParseError:
            if parser.error:
                raise ParseError(parser.result) from None
            raise
        return cls(header=header, payload=parser.buffer)

    def serialize(self, datagram_layer_checksum: int = 0) -> BufferList:
        """Encode the segment with a freshly computed checksum."""
        header_out = dataclasses.replace(self.header, cksum=0)
        check = InternetChecksum(datagram_layer_checksum)
        check.add(header_out.serialize())
        check.add(self.payload)
        header_out.cksum = check.value()

        out = BufferList(header_out.serialize())
        out.append(self.payload)
        return out

    def length_in_sequence_space(self) -> int:
        """Payload length, plus one for SYN and one for FIN."""
        return len(self.payload) + int(self.header.syn) + int(self.header.fin)
"""Text codec.

Converts entities to and from the single-line text forms kept in the three
store files. Encoding always produces the canonical pipe-delimited, labelled
form. Decoding also accepts the layouts written by earlier builds.
"""

from pyrental.codec.customers import decode_customer, encode_customer
from pyrental.codec.records import RecordResolver, decode_record, encode_record
from pyrental.codec.vehicles import decode_vehicle, encode_vehicle

__all__ = [
    "RecordResolver",
    "decode_customer",
    "decode_record",
    "decode_vehicle",
    "encode_customer",
    "encode_record",
    "encode_vehicle",
]

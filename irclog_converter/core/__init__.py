"""Canonical event model, context, errors and the conversion driver.

WHY: The core package is the stable heart of the converter. Every codec
in formats/ depends on it and nothing in it depends on a codec.

HOW: event.py defines the Event dataclasses, context.py the read-only
decode/encode Context, errors.py the exception hierarchy, tokens.py the
whitespace-preserving tokenizer and shape matcher used by text dialects,
and convert.py the driver that pipes a decoder into an encoder.

RULES:
- Event dataclasses are the contract between codecs; change with care
- No dialect-specific logic here
"""

"""Schemaless conversion of ISO 20022 XML messages into nested dicts.

Only the local names of elements are used as keys.  Leaf elements
become strings, amounts (elements with a ``Ccy`` attribute) become
``{"Ccy": ..., "amt": ...}`` and repeated elements become lists.
"""

from __future__ import annotations

import typing as _typing


if _typing.TYPE_CHECKING:
    import lxml.etree as _etree

    from . import _file


ISO_20022_NAMESPACE_PREFIX = "urn:iso:std:iso:20022:tech:xsd:"


def sepa_schema_from_uri(uri: str | None, /) -> str | None:
    """
    >>> sepa_schema_from_uri("urn:iso:std:iso:20022:tech:xsd:pain.008.003.02")
    'pain.008.003.02'
    >>> sepa_schema_from_uri("http://www.w3.org/2001/XMLSchema-instance") is None
    True
    """
    if uri and uri.startswith(ISO_20022_NAMESPACE_PREFIX):
        return uri.rsplit(":", 1)[1] or None
    else:
        return None


def _local_name(elt: _etree._Element) -> str:
    import lxml.etree

    return lxml.etree.QName(elt).localname


def element_to_dict_value(elt: _etree._Element) -> str | dict:
    children = [c for c in elt if isinstance(c.tag, str)]
    if not children:
        text = (elt.text or "").strip()
        if "Ccy" in elt.attrib:
            return {"Ccy": elt.attrib["Ccy"], "amt": text}
        return text
    d: dict[str, _typing.Any] = {}
    for child in children:
        key = _local_name(child)
        value = element_to_dict_value(child)
        if key not in d:
            d[key] = value
        elif isinstance(d[key], list):
            d[key].append(value)
        else:
            d[key] = [d[key], value]
    return d


def iso20022_xml_bytes_to_dict(
    content: bytes, /, *, expected_format: str | None = None
) -> dict:
    """Parse the ISO 20022 message *content*.

    The returned dict has the root element's local name as its only key
    besides ``"sepa_schema"`` (e.g. ``"pain.008.003.02"``).

    >>> xml = b'<Document xmlns="urn:iso:std:iso:20022:tech:xsd:pain.008.003.02">'
    >>> xml += b'<A><B>1</B><B>2</B><C Ccy="EUR">3.00</C></A></Document>'
    >>> iso20022_xml_bytes_to_dict(xml, expected_format="pain.008")
    {'Document': {'A': {'B': ['1', '2'], 'C': {'Ccy': 'EUR', 'amt': '3.00'}}}, 'sepa_schema': 'pain.008.003.02'}
    """
    import lxml.etree

    parser = lxml.etree.XMLParser(resolve_entities=False, no_network=True)
    root = lxml.etree.fromstring(content, parser=parser)
    sepa_schema = sepa_schema_from_uri(lxml.etree.QName(root).namespace)
    if expected_format:
        if not sepa_schema:
            raise RuntimeError("Cannot check format as no format was found")
        if not sepa_schema.startswith(expected_format):
            raise RuntimeError(
                f"Found format {sepa_schema!r}, expected format {expected_format!r}"
            )
    return {_local_name(root): element_to_dict_value(root), "sepa_schema": sepa_schema}


def iso20022_xml_file_to_dict(
    file_or_path: _file.PathLike | _typing.BinaryIO,
    /,
    *,
    expected_format: str | None = None,
) -> dict:
    from . import _file

    content = _file.slurp_bytes(file_or_path)
    return iso20022_xml_bytes_to_dict(content, expected_format=expected_format)


def element_or_list_to_list(obj: dict | list | None) -> list:
    if obj is None:
        return []
    elif isinstance(obj, dict):
        return [obj]
    else:
        return obj


def amount_string_to_cents(amount: str, /) -> int:
    """
    >>> amount_string_to_cents("20.00")
    2000
    """
    from . import _util

    return _util.amount_to_cents(amount)

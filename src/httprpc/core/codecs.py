"""
Codecs for request and response bodies.

Each codec turns a value into bytes (``marshal``) and bytes into a value
(``unmarshal``). ``unmarshal`` accepts an optional target:

- ``None``: the decoded value is returned as is
- a ``dict`` / ``list`` instance: filled in place and returned
- a pydantic model class: validated instance returned
- a dataclass class: instance built from the known fields and returned
- a dataclass or pydantic model instance: known fields assigned in place

Unknown keys are ignored when filling models and dataclasses.
"""

import dataclasses
import json
import xml.etree.ElementTree as ET
from typing import Any, Dict, Mapping, Protocol

from pydantic import BaseModel

from .exceptions import DecodeError, EncodeError


class Codec(Protocol):
    """Marshal/unmarshal pair for one wire format."""

    name: str
    content_type: str

    def marshal(self, value: Any) -> bytes:
        ...

    def unmarshal(self, data: bytes, target: Any = None) -> Any:
        ...


def _to_plain(value: Any) -> Any:
    """Pydantic models and dataclass instances as plain dicts."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return value


def _require_mapping(decoded: Any, target: Any, fmt: str) -> Mapping[str, Any]:
    if not isinstance(decoded, Mapping):
        raise DecodeError(
            f"cannot decode {type(decoded).__name__} into {_describe(target)}", fmt
        )
    return decoded


def _describe(target: Any) -> str:
    if isinstance(target, type):
        return target.__name__
    return type(target).__name__


def fill_target(decoded: Any, target: Any, fmt: str) -> Any:
    """
    Put an already decoded value into ``target``.

    Raises:
        DecodeError: shape of ``decoded`` does not fit ``target``
    """
    if target is None:
        return decoded

    try:
        if isinstance(target, type):
            if issubclass(target, BaseModel):
                return target.model_validate(decoded)
            if dataclasses.is_dataclass(target):
                mapping = _require_mapping(decoded, target, fmt)
                names = {f.name for f in dataclasses.fields(target) if f.init}
                return target(**{k: v for k, v in mapping.items() if k in names})
            return target(decoded)

        if isinstance(target, dict):
            target.update(_require_mapping(decoded, target, fmt))
            return target

        if isinstance(target, list):
            if not isinstance(decoded, list):
                raise DecodeError(f"cannot decode {type(decoded).__name__} into list", fmt)
            target[:] = decoded
            return target

        if isinstance(target, BaseModel):
            mapping = _require_mapping(decoded, target, fmt)
            merged = {**target.model_dump(), **mapping}
            validated = type(target).model_validate(merged)
            for name in type(target).model_fields:
                setattr(target, name, getattr(validated, name))
            return target

        if dataclasses.is_dataclass(target):
            mapping = _require_mapping(decoded, target, fmt)
            for f in dataclasses.fields(target):
                if f.name in mapping:
                    setattr(target, f.name, mapping[f.name])
            return target

    except (TypeError, ValueError) as exc:
        # pydantic.ValidationError is a ValueError
        raise DecodeError(str(exc), fmt) from exc

    raise DecodeError(f"unsupported target type {_describe(target)}", fmt)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# JSON
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class JSONCodec:
    """
    JSON codec on top of the ``json`` module.

    Example:
        >>> JSON.marshal({"hello": "world"})
        b'{"hello": "world"}'
        >>> JSON.unmarshal(b'{"hello": "world"}', {})
        {'hello': 'world'}
    """

    name = "json"
    content_type = "application/json"

    def marshal(self, value: Any) -> bytes:
        try:
            return json.dumps(_to_plain(value)).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise EncodeError(str(exc), self.name) from exc

    def unmarshal(self, data: bytes, target: Any = None) -> Any:
        try:
            decoded = json.loads(data)
        except (ValueError, UnicodeDecodeError) as exc:
            raise DecodeError(str(exc), self.name) from exc
        return fill_target(decoded, target, self.name)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# XML
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _build_element(element: ET.Element, content: Any) -> None:
    if content is None:
        return
    if isinstance(content, Mapping):
        for key, value in content.items():
            items = value if isinstance(value, (list, tuple)) else [value]
            for item in items:
                _build_element(ET.SubElement(element, str(key)), _to_plain(item))
        return
    if isinstance(content, bool):
        element.text = "true" if content else "false"
        return
    element.text = str(content)


def _element_to_python(element: ET.Element) -> Any:
    """
    Element -> python.

    Leaves become their text. Elements with children or attributes become a
    dict: attributes first, then children (repeated tags collected in lists),
    plus non-blank own text under "text".
    """
    children = list(element)
    if not children and not element.attrib:
        return element.text or ""

    result: Dict[str, Any] = dict(element.attrib)
    for child in children:
        value = _element_to_python(child)
        if child.tag in result:
            existing = result[child.tag]
            if isinstance(existing, list):
                existing.append(value)
            else:
                result[child.tag] = [existing, value]
        else:
            result[child.tag] = value

    text = (element.text or "").strip()
    if text:
        result["text"] = text
    return result


class XMLCodec:
    """
    XML codec on top of ``xml.etree.ElementTree``.

    Marshal: ``None`` is an empty document, a dataclass or pydantic model
    becomes a root element named after its class with one child per field,
    a single-key mapping becomes a root element named after the key.

    Unmarshal: the root's content is filled into the target; without a target
    ``{root_tag: content}`` is returned.

    Example:
        >>> @dataclass
        ... class Hello:
        ...     Hello: str = ""
        >>> XML.marshal(Hello(Hello="world"))
        b'<Hello><Hello>world</Hello></Hello>'
    """

    name = "xml"
    content_type = "application/xml"

    def marshal(self, value: Any) -> bytes:
        if value is None:
            return b""

        if isinstance(value, BaseModel) or (
            dataclasses.is_dataclass(value) and not isinstance(value, type)
        ):
            root_tag, content = type(value).__name__, _to_plain(value)
        elif isinstance(value, Mapping) and len(value) == 1:
            root_tag, content = next(iter(value.items()))
        else:
            raise EncodeError(
                f"unsupported value type {type(value).__name__}, "
                "expected a dataclass, a pydantic model or a single-root mapping",
                self.name,
            )

        root = ET.Element(str(root_tag))
        _build_element(root, _to_plain(content))
        return ET.tostring(root, encoding="unicode").encode("utf-8")

    def unmarshal(self, data: bytes, target: Any = None) -> Any:
        if not data or not data.strip():
            raise DecodeError("empty document", self.name)
        try:
            root = ET.fromstring(data)
        except ET.ParseError as exc:
            raise DecodeError(str(exc), self.name) from exc

        content = _element_to_python(root)
        if target is None:
            return {root.tag: content}
        return fill_target(content, target, self.name)


JSON = JSONCodec()
XML = XMLCodec()

_CODECS: Dict[str, Codec] = {JSON.name: JSON, XML.name: XML}


def get_codec(name: str) -> Codec:
    """
    Codec by name ('json' or 'xml').

    Raises:
        KeyError: unknown codec
    """
    return _CODECS[name.lower()]


def register_codec(codec: Codec) -> None:
    """Make an extra codec available through get_codec()."""
    _CODECS[codec.name.lower()] = codec


__all__ = [
    "Codec",
    "JSONCodec",
    "XMLCodec",
    "JSON",
    "XML",
    "fill_target",
    "get_codec",
    "register_codec",
]

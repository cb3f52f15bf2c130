"""
YAML loader producing plain value trees.

Extends SafeLoader so that everything it constructs is a value tree:
- Timestamps stay strings ("2024-01-01" is not a date)
- Mapping keys are their literal scalar text ("1: a" gives key "1")
- Complex (mapping/sequence) keys are rejected
"""

from __future__ import annotations

import typing as _typing

import yaml as _yaml


class ValuesLoader(_yaml.SafeLoader):
    """
    SafeLoader that only builds None/bool/int/float/str/list/dict.

    Usage:
        >>> import yaml
        >>> yaml.load("created: 2024-01-01\\n1: one", Loader=ValuesLoader)
        {'created': '2024-01-01', '1': 'one'}
    """

    def construct_mapping(
        self, node: _yaml.MappingNode, deep: bool = False
    ) -> dict[str, _typing.Any]:
        """Build a dict keyed by the literal text of each scalar key."""
        if not isinstance(node, _yaml.MappingNode):
            raise _yaml.constructor.ConstructorError(
                None,
                None,
                f"expected a mapping node, but found {node.id}",
                node.start_mark,
            )
        self.flatten_mapping(node)
        result: dict[str, _typing.Any] = {}
        for key_node, value_node in node.value:
            if not isinstance(key_node, _yaml.ScalarNode):
                raise _yaml.constructor.ConstructorError(
                    "while constructing a mapping",
                    node.start_mark,
                    "found a non-scalar key",
                    key_node.start_mark,
                )
            result[key_node.value] = self.construct_object(value_node, deep=deep)
        return result


def _construct_values_mapping(
    loader: ValuesLoader,
    node: _yaml.MappingNode,
) -> _typing.Iterator[dict[str, _typing.Any]]:
    # Two-step construction so recursive anchors resolve like SafeLoader's.
    data: dict[str, _typing.Any] = {}
    yield data
    data.update(loader.construct_mapping(node))


def _construct_timestamp_as_text(
    loader: ValuesLoader,
    node: _yaml.ScalarNode,
) -> str:
    return str(loader.construct_scalar(node))


ValuesLoader.add_constructor(
    _yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_values_mapping,
)
ValuesLoader.add_constructor("tag:yaml.org,2002:timestamp", _construct_timestamp_as_text)

_RESOLVER = _yaml.resolver.Resolver()


def load(text: str) -> _typing.Any:
    """
    Parse one YAML document into a value tree.

    Raises:
        yaml.YAMLError: If the text is not valid YAML.
    """
    return _yaml.load(text, Loader=ValuesLoader)


def is_plain_key(key: str) -> bool:
    """
    Check if a key reads back as the same string when written unquoted.

    Keys that YAML would resolve to another type (true, 1, null, ...),
    that contain indicator characters, or that hold non-printable
    characters need quoting.
    """
    if not key or key != key.strip() or not key.isprintable():
        return False
    if any(char in key for char in ":#{}[],&*!|>'\"%@`\n\t") or key[0] in "-?":
        return False
    resolved = _RESOLVER.resolve(_yaml.ScalarNode, key, (True, False))
    return bool(resolved == "tag:yaml.org,2002:str")

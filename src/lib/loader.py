"""
Rule loader

Reads rule definitions from the document metadata and/or a YAML file and
turns them into a RuleStore.

Definitions look like this (document front matter or rules file):

    flexspan:
      - left: "[["
        right: "]]"
        command: mycustombox
      - pre: "!!"
        cmd: custombox
        opts: Cerulean
      - left: "(("
        right: "))"
        class: note
        content: Important Note!
      - left: "~~"
        command: strike
        exact: true

A rules file may also hold the bare list. Every key has aliases (see
models.rules); a definition without left or command is dropped.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..config import appsettings
from ..models.rules import (
    FilterRule,
    RuleStore,
    LEFT_ALIASES,
    RIGHT_ALIASES,
    COMMAND_ALIASES,
    OPTIONS_ALIASES,
    CONTENT_ALIASES,
    EXACT_ALIASES,
)
from .log import LOG


class RuleConfigError(Exception):
    """Raised when a rules file cannot be read or parsed"""
    pass


TRUE_STRINGS = {"true", "yes", "on", "1"}


def inlines_stringify(inlines: List[Any]) -> str:
    """
    Plain text of a list of pandoc inline JSON elements

    Follows pandoc.utils.stringify: Space/SoftBreak/LineBreak become a
    blank, Code/Math keep their text, containers are flattened, notes
    are dropped.
    """
    parts: List[str] = []
    for element in inlines:
        kind = element.get("t")
        content = element.get("c")
        if kind == "Str":
            parts.append(content)
        elif kind in ("Space", "SoftBreak", "LineBreak"):
            parts.append(" ")
        elif kind in ("Code", "Math", "RawInline"):
            parts.append(content[1])
        elif kind in ("Emph", "Strong", "Underline", "Strikeout",
                      "Superscript", "Subscript", "SmallCaps"):
            parts.append(inlines_stringify(content))
        elif kind in ("Quoted", "Cite", "Span"):
            parts.append(inlines_stringify(content[1]))
        elif kind in ("Link", "Image"):
            parts.append(inlines_stringify(content[1]))
    return "".join(parts)


def blocks_stringify(blocks: List[Any]) -> str:
    """Plain text of Plain/Para blocks, joined by newlines"""
    parts = []
    for block in blocks:
        if block.get("t") in ("Plain", "Para"):
            parts.append(inlines_stringify(block["c"]))
    return "\n".join(parts)


def meta_toPython(value: Any) -> Any:
    """
    Convert a pandoc metadata JSON value to plain Python

    Args:
        value: A MetaValue ({"t": "MetaMap", "c": ...}, etc.)

    Returns:
        dict / list / str / bool

    Example:
        {"t": "MetaInlines", "c": [{"t": "Str", "c": "[["}]} -> "[["
    """
    if not isinstance(value, dict) or "t" not in value:
        return value

    kind = value["t"]
    content = value.get("c")
    if kind == "MetaMap":
        return {k: meta_toPython(v) for k, v in content.items()}
    if kind == "MetaList":
        return [meta_toPython(v) for v in content]
    if kind == "MetaBool":
        return bool(content)
    if kind == "MetaString":
        return content
    if kind == "MetaInlines":
        return inlines_stringify(content)
    if kind == "MetaBlocks":
        return blocks_stringify(content)
    return content


def alias_get(definition: Dict[str, Any], aliases: tuple) -> Optional[Any]:
    """Value under the first alias present in the definition"""
    for alias in aliases:
        if alias in definition and definition[alias] is not None:
            return definition[alias]
    return None


def value_stringify(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


def flag_parse(value: Any) -> bool:
    """Boolean-ish flag: true/yes/on/1 (any case), or a real boolean"""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUE_STRINGS


def rule_fromDefinition(definition: Any) -> Optional[FilterRule]:
    """
    Build a FilterRule from one definition mapping

    Args:
        definition: Mapping with aliased keys

    Returns:
        FilterRule, or None if left or command is missing/empty
    """
    if not isinstance(definition, dict):
        LOG(f"Ignoring rule definition that is not a mapping: {definition!r}", level=2)
        return None

    left = value_stringify(alias_get(definition, LEFT_ALIASES))
    command = value_stringify(alias_get(definition, COMMAND_ALIASES))
    if not left or not command:
        LOG(f"Ignoring rule definition without left/command: {definition!r}", level=2)
        return None

    right = value_stringify(alias_get(definition, RIGHT_ALIASES)) or left

    return FilterRule(
        left=left,
        right=right,
        command=command,
        default_options=value_stringify(alias_get(definition, OPTIONS_ALIASES)),
        content_override=value_stringify(alias_get(definition, CONTENT_ALIASES)),
        exact=flag_parse(alias_get(definition, EXACT_ALIASES)),
    )


def rules_fromDefinitions(definitions: Any) -> List[FilterRule]:
    """Valid rules of a definition list, in definition order"""
    if definitions is None:
        return []
    if isinstance(definitions, dict):
        definitions = [definitions]
    if not isinstance(definitions, list):
        LOG(f"Ignoring rule definitions that are not a list: {definitions!r}", level=2)
        return []

    rules = []
    for definition in definitions:
        rule = rule_fromDefinition(definition)
        if rule is not None:
            rules.append(rule)
    return rules


def definitions_fromMeta(meta: Optional[Dict[str, Any]], meta_name: Optional[str] = None) -> Any:
    """
    Rule definitions from a pandoc JSON "meta" object

    Args:
        meta: The document's meta mapping (key -> MetaValue)
        meta_name: Metadata key (default: appsettings.meta_name)

    Returns:
        Plain Python definitions, or None if the key is absent
    """
    if meta_name is None:
        meta_name = appsettings.meta_name
    if not meta or meta_name not in meta:
        return None
    return meta_toPython(meta[meta_name])


def definitions_fromYAML(path: Union[str, Path], meta_name: Optional[str] = None) -> Any:
    """
    Rule definitions from a YAML file

    The file holds either the definition list itself or a mapping with
    the metadata key (so a document's front matter can be reused).

    Raises:
        RuleConfigError: If the file is missing or not valid YAML
    """
    if meta_name is None:
        meta_name = appsettings.meta_name
    path = Path(path)

    try:
        with open(path, 'r', encoding='utf-8') as f:
            config: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise RuleConfigError(f"Failed to parse {path}: {e}")
    except OSError as e:
        raise RuleConfigError(f"Failed to load {path}: {e}")

    if isinstance(config, dict) and meta_name in config:
        return config[meta_name]
    return config


def store_load(
    meta: Optional[Dict[str, Any]] = None,
    rules_file: Optional[Union[str, Path]] = None,
    meta_name: Optional[str] = None,
) -> RuleStore:
    """
    Build the RuleStore for one document

    Rules file definitions come first, document definitions after; for
    identical rules the first one wins.

    Args:
        meta: The document's meta mapping
        rules_file: Optional YAML rules file
        meta_name: Metadata key (default: appsettings.meta_name)

    Returns:
        RuleStore (possibly empty)
    """
    rules: List[FilterRule] = []
    if rules_file:
        rules.extend(rules_fromDefinitions(definitions_fromYAML(rules_file, meta_name)))
    rules.extend(rules_fromDefinitions(definitions_fromMeta(meta, meta_name)))

    store = RuleStore.rules_make(rules)
    LOG(f"Loaded {len(store)} rules", level=2)
    return store

"""
Dictionary store for glyph-variant conversion.

This module handles:
- The direct character map (new form -> old form) and its reverse
- Context-sensitive conditional rules keyed by character
- The idiom map (multi-character new-form phrase -> old-form phrase)
- Loading all three tables from CSV/TSV/JSON files
- A small built-in default dictionary

Design Philosophy:
- A DictionaryStore is immutable after construction
- The reverse map is built once, in the character map's insertion order;
  when two new forms share an old form, the later entry wins
- Missing conditional or idiom tables behave as empty tables
"""

from __future__ import annotations

import csv
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Iterable, Iterator, Mapping

logger = logging.getLogger("kyujitai-dictionary")

# (previous character, next character) -> bool; "" stands for the text edge
Predicate = Callable[[str, str], bool]


class DictionaryFormatError(ValueError):
    """Raised when a dictionary table or file is malformed."""


@dataclass(frozen=True)
class ContextPredicate:
    """Declarative neighbour test used by file-based conditional rules.

    Every constraint that is set must hold. An empty string inside a set
    matches the start or end of the text.

    Attributes:
        prev: Previous character must be one of these
        next: Next character must be one of these
        not_prev: Previous character must not be one of these
        not_next: Next character must not be one of these
    """
    prev: frozenset[str] | None = None
    next: frozenset[str] | None = None
    not_prev: frozenset[str] | None = None
    not_next: frozenset[str] | None = None

    def __call__(self, prev: str, next_: str) -> bool:
        if self.prev is not None and prev not in self.prev:
            return False
        if self.next is not None and next_ not in self.next:
            return False
        if self.not_prev is not None and prev in self.not_prev:
            return False
        if self.not_next is not None and next_ in self.not_next:
            return False
        return True


@dataclass(frozen=True)
class ConditionalRule:
    """A context-dependent override for a single character.

    Attributes:
        predicate: Called with (prev, next); the rule fires when it returns True
        replacement: Character emitted when the rule fires
    """
    predicate: Predicate
    replacement: str

    def matches(self, prev: str, next_: str) -> bool:
        return bool(self.predicate(prev, next_))


class DictionaryStore:
    """Read-only lookup tables for the conversion engine.

    Usage:
        store = DictionaryStore({"弁": "辨"}, idioms={"弁護士": "辯護士"})
        store.to_old("弁")   # "辨"
        store.to_new("辨")   # "弁"
    """

    def __init__(
        self,
        characters: Mapping[str, str],
        conditional: Mapping[str, Iterable[ConditionalRule]] | None = None,
        idioms: Mapping[str, str] | None = None,
        name: str = "default",
    ):
        self.name = name

        chars: dict[str, str] = {}
        for new, old in characters.items():
            if len(new) != 1 or len(old) != 1:
                raise DictionaryFormatError(
                    f"Character map entries must be single characters: {new!r} -> {old!r}"
                )
            chars[new] = old

        # Later entries overwrite earlier ones for the same old form
        reverse: dict[str, str] = {}
        for new, old in chars.items():
            reverse[old] = new

        rules: dict[str, tuple[ConditionalRule, ...]] = {}
        for char, char_rules in (conditional or {}).items():
            rules[char] = tuple(char_rules)

        idiom_map: dict[str, str] = {}
        for source, target in (idioms or {}).items():
            if len(source) < 2:
                raise DictionaryFormatError(
                    f"Idioms must have at least two characters: {source!r}"
                )
            idiom_map[source] = target

        self._characters = MappingProxyType(chars)
        self._reverse = MappingProxyType(reverse)
        self._conditional = MappingProxyType(rules)
        self._idioms = MappingProxyType(idiom_map)
        # Longest idioms first; equal lengths keep insertion order
        self._idiom_order = tuple(
            sorted(idiom_map.items(), key=lambda item: len(item[0]), reverse=True)
        )

        logger.debug(
            "Built dictionary %s: %d characters, %d reverse, %d conditional, %d idioms",
            name, len(chars), len(reverse), len(rules), len(idiom_map),
        )

    def __len__(self) -> int:
        return len(self._characters)

    def __iter__(self) -> Iterator[str]:
        return iter(self._characters)

    def __contains__(self, char: object) -> bool:
        return char in self._characters

    @property
    def characters(self) -> Mapping[str, str]:
        return self._characters

    @property
    def reverse(self) -> Mapping[str, str]:
        return self._reverse

    @property
    def conditional(self) -> Mapping[str, tuple[ConditionalRule, ...]]:
        return self._conditional

    @property
    def idioms(self) -> Mapping[str, str]:
        return self._idioms

    def to_old(self, char: str) -> str | None:
        """Old form of a new-form character, or None."""
        return self._characters.get(char)

    def to_new(self, char: str) -> str | None:
        """New form of an old-form character, or None."""
        return self._reverse.get(char)

    def rules_for(self, char: str) -> tuple[ConditionalRule, ...]:
        """Conditional rules for a character, in priority order."""
        return self._conditional.get(char, ())

    def idiom_items(self) -> tuple[tuple[str, str], ...]:
        """Idiom pairs in application order (longest source first)."""
        return self._idiom_order

    def summary(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "characters": len(self._characters),
            "reverse": len(self._reverse),
            "conditional": len(self._conditional),
            "idioms": len(self._idioms),
        }


# ============================================================================
# Loading Functions
# ============================================================================

def _read_pairs(path: Path, has_header: bool = False) -> list[tuple[int, str, str]]:
    """Read (line, left, right) rows from a CSV or tab-separated file."""
    rows: list[tuple[int, str, str]] = []
    with open(path, "r", encoding="utf-8", newline="") as f:
        if path.suffix.lower() == ".csv":
            reader = csv.reader(f)
        else:
            reader = csv.reader(f, delimiter="\t", quoting=csv.QUOTE_NONE)
        for row in reader:
            line_no = reader.line_num
            if has_header and line_no == 1:
                continue
            if not row or not row[0].strip() or row[0].lstrip().startswith("#"):
                continue
            if len(row) < 2 or not row[1].strip():
                raise DictionaryFormatError(f"{path}:{line_no}: expected two columns")
            rows.append((line_no, row[0].strip(), row[1].strip()))
    return rows


def load_character_map(path: str | Path, has_header: bool = False) -> dict[str, str]:
    """Load a character map from a CSV (``new,old``) or TSV (``new<TAB>old``) file.

    Rows keep file order, which fixes the reverse map's tie-breaking.
    """
    path = Path(path)
    mapping: dict[str, str] = {}
    for line_no, new, old in _read_pairs(path, has_header):
        if len(new) != 1 or len(old) != 1:
            raise DictionaryFormatError(
                f"{path}:{line_no}: character map entries must be single characters"
            )
        if new in mapping:
            logger.warning("%s:%d: duplicate entry for %s overrides earlier one", path, line_no, new)
        mapping[new] = old
    logger.debug("Loaded %d character pairs from %s", len(mapping), path)
    return mapping


def load_idiom_map(path: str | Path, has_header: bool = False) -> dict[str, str]:
    """Load an idiom map from a CSV or TSV file (``new_idiom,old_idiom``)."""
    path = Path(path)
    mapping: dict[str, str] = {}
    for line_no, new, old in _read_pairs(path, has_header):
        if len(new) < 2:
            raise DictionaryFormatError(
                f"{path}:{line_no}: idioms must have at least two characters"
            )
        mapping[new] = old
    logger.debug("Loaded %d idioms from %s", len(mapping), path)
    return mapping


def _char_set(value: Any, where: str) -> frozenset[str] | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, str) and len(v) <= 1 for v in value):
        raise DictionaryFormatError(f"{where}: expected a list of single characters")
    return frozenset(value)


def parse_conditional_rules(data: Mapping[str, Any], source: str = "<data>") -> dict[str, list[ConditionalRule]]:
    """Build conditional rules from their JSON form.

    Format:
        {"芸": [{"next": ["香"], "replacement": "芸"}], ...}
    """
    if not isinstance(data, Mapping):
        raise DictionaryFormatError(f"{source}: conditional rules must be an object")
    rules: dict[str, list[ConditionalRule]] = {}
    for char, entries in data.items():
        where = f"{source}[{char}]"
        if len(char) != 1:
            raise DictionaryFormatError(f"{where}: key must be a single character")
        if not isinstance(entries, list):
            raise DictionaryFormatError(f"{where}: expected a list of rules")
        parsed = []
        for i, entry in enumerate(entries):
            if not isinstance(entry, Mapping) or not isinstance(entry.get("replacement"), str):
                raise DictionaryFormatError(f"{where}[{i}]: rule needs a 'replacement' string")
            predicate = ContextPredicate(
                prev=_char_set(entry.get("prev"), f"{where}[{i}].prev"),
                next=_char_set(entry.get("next"), f"{where}[{i}].next"),
                not_prev=_char_set(entry.get("not_prev"), f"{where}[{i}].not_prev"),
                not_next=_char_set(entry.get("not_next"), f"{where}[{i}].not_next"),
            )
            parsed.append(ConditionalRule(predicate, entry["replacement"]))
        rules[char] = parsed
    return rules


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise DictionaryFormatError(f"{path}:{e.lineno}: invalid JSON ({e.msg})") from e


def load_conditional_rules(path: str | Path) -> dict[str, list[ConditionalRule]]:
    """Load conditional rules from a JSON file."""
    path = Path(path)
    rules = parse_conditional_rules(_read_json(path), str(path))
    logger.debug("Loaded conditional rules for %d characters from %s", len(rules), path)
    return rules


def load_dictionary_bundle(path: str | Path) -> DictionaryStore:
    """Load all three tables from one JSON file.

    Format:
        {"characters": {...}, "conditional": {...}, "idioms": {...}}
    Only "characters" is required.
    """
    path = Path(path)
    data = _read_json(path)
    if not isinstance(data, Mapping) or not isinstance(data.get("characters"), Mapping):
        raise DictionaryFormatError(f"{path}: bundle needs a 'characters' object")
    idioms = data.get("idioms") or {}
    if not isinstance(idioms, Mapping):
        raise DictionaryFormatError(f"{path}: 'idioms' must be an object")
    conditional = parse_conditional_rules(data.get("conditional") or {}, str(path))
    return DictionaryStore(data["characters"], conditional, idioms, name=path.stem)


def load_dictionary(
    characters: str | Path,
    conditional: str | Path | None = None,
    idioms: str | Path | None = None,
) -> DictionaryStore:
    """Load a dictionary from separate table files; the optional ones may be omitted."""
    characters = Path(characters)
    return DictionaryStore(
        load_character_map(characters),
        load_conditional_rules(conditional) if conditional else None,
        load_idiom_map(idioms) if idioms else None,
        name=characters.stem,
    )


# ============================================================================
# Built-in Dictionary
# ============================================================================

# Common jōyō new forms followed by their traditional forms
_DEFAULT_PAIRS = """
亜亞 悪惡 圧壓 囲圍 医醫 壱壹 隠隱 栄榮 営營 駅驛 円圓 塩鹽 応應 欧歐 殴毆
桜櫻 奥奧 穏穩 仮假 価價 会會 絵繪 拡擴 覚覺 学學 楽樂 勧勸 巻卷 関關 歓歡
観觀 気氣 帰歸 偽僞 戯戲 犠犧 旧舊 拠據 挙擧 峡峽 狭狹 暁曉 区區 駆驅 径徑
恵惠 経經 継繼 軽輕 芸藝 欠缺 県縣 剣劍 険險 圏圈 検檢 権權 献獻 験驗 広廣
効效 号號 国國 済濟 斎齋 剤劑 雑雜 参參 蚕蠶 惨慘 賛贊 残殘 糸絲 歯齒 児兒
辞辭 湿濕 実實 写寫 釈釋 寿壽 収收 従從 渋澁 獣獸 縦縱 粛肅 処處 叙敍 焼燒
称稱 証證 乗乘 剰剩 条條 状狀 浄淨 畳疊 譲讓 醸釀 嘱囑 触觸 寝寢 慎愼 真眞
尽盡 図圖 粋粹 酔醉 随隨 髄髓 数數 枢樞 声聲 静靜 斉齊 摂攝 窃竊 専專 戦戰
浅淺 践踐 銭錢 潜潛 繊纖 禅禪 双雙 壮壯 争爭 荘莊 捜搜 挿插 巣巢 装裝 総總
騒騷 増增 臓臟 蔵藏 属屬 続續 堕墮 体體 対對 帯帶 滞滯 台臺 滝瀧 択擇 沢澤
担擔 単單 胆膽 団團 断斷 弾彈 遅遲 痴癡 虫蟲 昼晝 鋳鑄 庁廳 聴聽 鎮鎭 逓遞
鉄鐵 転轉 点點 伝傳 党黨 盗盜 灯燈 当當 闘鬭 独獨 読讀 届屆 縄繩 弐貳 悩惱
脳腦 廃廢 拝拜 売賣 麦麥 発發 髪髮 抜拔 蛮蠻 秘祕 浜濱 払拂 仏佛 併倂 並竝
変變 辺邊 弁辨 舗鋪 宝寶 豊豐 没沒 翻飜 満滿 黙默 訳譯 薬藥 与與 予豫 余餘
誉譽 揺搖 様樣 謡謠 来來 乱亂 覧覽 竜龍 両兩 猟獵 塁壘 励勵 礼禮 霊靈 齢齡
恋戀 炉爐 労勞 楼樓 録錄 湾灣
"""

_DEFAULT_CONDITIONAL = {
    "弁": [
        {"next": ["護", "論", "舌", "明", "解"], "replacement": "辯"},
        {"next": ["膜"], "replacement": "瓣"},
        {"prev": ["花"], "replacement": "瓣"},
    ],
    "芸": [{"next": ["香"], "replacement": "芸"}],
    "欠": [{"next": ["伸"], "replacement": "欠"}],
    "台": [
        {"prev": ["天"], "replacement": "台"},
        {"next": ["風"], "replacement": "颱"},
    ],
}

_DEFAULT_IDIOMS = {
    "弁護士": "辯護士",
    "台風": "颱風",
    "花弁": "花瓣",
    "天台宗": "天台宗",
}


def get_default_dictionary() -> DictionaryStore:
    """Return the built-in shinjitai -> kyūjitai dictionary."""
    characters = {pair[0]: pair[1] for pair in _DEFAULT_PAIRS.split()}
    return DictionaryStore(
        characters,
        parse_conditional_rules(_DEFAULT_CONDITIONAL, "builtin"),
        _DEFAULT_IDIOMS,
        name="builtin",
    )

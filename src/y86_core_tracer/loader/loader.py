# y86_core_tracer/loader/loader.py
"""
オブジェクトコードローダーモジュール。
Y86-64のテキスト形式オブジェクトコード (.yo) を解析し、
メモリイメージ・エントリポイント・タッチ済みワード集合を生成します。
"""
import logging
import re
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from y86_core_tracer.core.errors import AddressError, LoadError
from y86_core_tracer.transport.memory import DEFAULT_MEMORY_SIZE, Memory

logger = logging.getLogger(__name__)

# @intent:constant "0x<アドレス>: <バイト列>" 形式の行にマッチする正規表現。
RECORD_PATTERN = re.compile(r"^0x([0-9a-fA-F]+):\s*([0-9a-fA-F]+(?:\s+[0-9a-fA-F]+)*)")
HEX_TOKEN = re.compile(r"^[0-9a-fA-F]+$")

# @intent:data_structure ロード結果。loaderが返した時点でメモリは完全に構築済みです。
@dataclass
class LoadedProgram:
    memory: Memory
    entry_point: int
    touched_words: FrozenSet[int] = field(default_factory=frozenset)
    record_count: int = 0


class ObjectCodeLoader:
    """
    .yo形式のテキストを解析し、新しいMemoryにデータをロードするローダー。
    """
    def __init__(self, memory_size: int = DEFAULT_MEMORY_SIZE):
        self._memory_size = memory_size

    # @intent:responsibility 1行からコメントと説明部を取り除き、アドレスとバイト列に分解します。
    # @intent:return レコードでない行（空行、コメントのみの行など）ではNone。
    def _parse_line(self, raw_line: str) -> Optional[tuple]:
        line = raw_line.split("#", 1)[0]
        line = line.split("|", 1)[0].strip()
        if not line:
            return None

        match = RECORD_PATTERN.match(line)
        if not match:
            return None

        address = int(match.group(1), 16)
        tokens = match.group(2).split()
        # 先頭トークン以降は、偶数桁の16進トークンだけをバイト列の続きとして扱う
        hex_digits = tokens[0]
        for token in tokens[1:]:
            if len(token) % 2 != 0 or not HEX_TOKEN.match(token):
                break
            hex_digits += token
        return address, hex_digits

    def load_text(self, text: str) -> LoadedProgram:
        """
        オブジェクトコードのテキストをロードします。
        いずれかのアドレスがメモリ範囲外の場合はLoadError(ADR)を送出し、ロード全体を中止します。
        """
        memory = Memory(self._memory_size)
        entry_point: Optional[int] = None
        record_count = 0

        for line_num, raw_line in enumerate(text.splitlines(), 1):
            parsed = self._parse_line(raw_line)
            if parsed is None:
                continue
            address, hex_digits = parsed

            if address >= self._memory_size:
                raise LoadError(f"Program address out of range on line {line_num}: {address:#x}")

            for offset in range(0, len(hex_digits), 2):
                # 末尾の1桁だけの要素も1バイトの値として書き込む
                value = int(hex_digits[offset:offset + 2], 16)
                target = address + offset // 2
                try:
                    memory.write(target, value)
                except AddressError as e:
                    raise LoadError(f"Program exceeds memory on line {line_num}: {target:#x}") from e

            record_count += 1
            entry_point = address if entry_point is None else min(entry_point, address)

        touched = frozenset(memory.get_and_clear_touched())
        logger.debug("Loaded %d records, entry point %#x", record_count, entry_point or 0)
        return LoadedProgram(
            memory=memory,
            entry_point=entry_point if entry_point is not None else 0,
            touched_words=touched,
            record_count=record_count,
        )

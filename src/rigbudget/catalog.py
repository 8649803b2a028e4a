from __future__ import annotations

import json
import logging
import sqlite3
import threading
import time
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Protocol

from pydantic import ValidationError

from .schemas import CategorySet, Component

logger = logging.getLogger(__name__)


class CatalogError(RuntimeError):
    """目录读取失败（文件缺失、格式错误、数据库错误）"""


class CatalogAccessor(Protocol):
    def fetch_all_grouped_by_category(self) -> CategorySet: ...


def group_by_category(components: Iterable[Component]) -> CategorySet:
    """按类别分组，组内按价格升序"""
    grouped: Dict[str, List[Component]] = {}
    for component in components:
        grouped.setdefault(component.type, []).append(component)
    for items in grouped.values():
        items.sort(key=lambda c: c.price)
    return grouped


def _parse_records(raw: Iterable[dict], source: str) -> List[Component]:
    try:
        return [Component.model_validate(item) for item in raw]
    except ValidationError as err:
        raise CatalogError(f"invalid component record in {source}: {err}") from err


class InMemoryCatalog:
    """调用方已持有配件列表时使用"""

    def __init__(self, components: Iterable[Component]):
        self._components = list(components)

    def fetch_all_grouped_by_category(self) -> CategorySet:
        return group_by_category(self._components)


class JsonCatalog:
    """
    JSON 目录 - JSON Catalog

    文件内容是配件记录数组。每次 fetch 都重新读取，得到独立快照。
    The file holds an array of component records. Every fetch re-reads it,
    so each generation works on its own snapshot.
    """

    def __init__(self, data_path: Path):
        self.data_path = Path(data_path)

    def fetch_all_grouped_by_category(self) -> CategorySet:
        try:
            with self.data_path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError as err:
            raise CatalogError(f"catalog file not found: {self.data_path}") from err
        except json.JSONDecodeError as err:
            raise CatalogError(f"catalog file is not valid JSON: {self.data_path}") from err
        if not isinstance(raw, list):
            raise CatalogError(f"catalog file must contain a JSON array: {self.data_path}")
        return group_by_category(_parse_records(raw, str(self.data_path)))


class SQLiteCatalog:
    """SQLite 目录，specs 与 vendor_links 以 JSON 文本存储"""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    def fetch_all_grouped_by_category(self) -> CategorySet:
        if not self.db_path.exists():
            raise CatalogError(f"catalog database not found: {self.db_path}")
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.row_factory = sqlite3.Row
                rows = conn.execute(
                    """
                    SELECT id, type, name, brand, price, specs_json, vendor_links_json
                    FROM components
                    ORDER BY type, price
                    """
                ).fetchall()
        except sqlite3.Error as err:
            raise CatalogError(f"catalog database error: {err}") from err

        records = []
        for row in rows:
            try:
                specs = json.loads(row["specs_json"] or "{}")
                vendor_links = json.loads(row["vendor_links_json"] or "{}")
            except json.JSONDecodeError as err:
                raise CatalogError(f"bad JSON column for component {row['id']}") from err
            records.append(
                {
                    "id": row["id"],
                    "type": row["type"],
                    "name": row["name"],
                    "brand": row["brand"] or "",
                    "price": row["price"],
                    "specs": specs,
                    "vendor_links": vendor_links,
                }
            )
        return group_by_category(_parse_records(records, str(self.db_path)))


def write_components(db_path: Path, components: Iterable[Component]) -> int:
    """建表并写入配件，已存在的 id 会被覆盖"""
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    rows = [
        (
            c.id,
            c.type,
            c.name,
            c.brand,
            c.price,
            json.dumps(c.specs.model_dump(exclude_none=True), ensure_ascii=False),
            json.dumps(c.vendor_links, ensure_ascii=False),
        )
        for c in components
    ]
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS components (
                id TEXT PRIMARY KEY,
                type TEXT NOT NULL,
                name TEXT NOT NULL,
                brand TEXT NOT NULL DEFAULT '',
                price REAL NOT NULL,
                specs_json TEXT NOT NULL DEFAULT '{}',
                vendor_links_json TEXT NOT NULL DEFAULT '{}'
            )
            """
        )
        conn.executemany(
            """
            INSERT OR REPLACE INTO components
                (id, type, name, brand, price, specs_json, vendor_links_json)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            rows,
        )
        conn.commit()
    return len(rows)


class CachedCatalog:
    """
    目录缓存 - Catalog Cache

    由调用方显式持有的快照缓存，在 ttl_seconds 内重复返回同一快照，过期或
    invalidate() 后重新读取底层目录。
    Snapshot cache owned by the caller: the same snapshot is served for
    ``ttl_seconds``, then (or after ``invalidate()``) the inner catalog is read
    again.
    """

    def __init__(
        self,
        inner: CatalogAccessor,
        ttl_seconds: float = 24 * 3600,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.inner = inner
        self.ttl_seconds = max(0.0, float(ttl_seconds))
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot: CategorySet | None = None
        self._loaded_at = 0.0

    def fetch_all_grouped_by_category(self) -> CategorySet:
        with self._lock:
            now = self._clock()
            if self._snapshot is None or now - self._loaded_at >= self.ttl_seconds:
                self._snapshot = self.inner.fetch_all_grouped_by_category()
                self._loaded_at = now
                logger.info(
                    "catalog refreshed: %d components",
                    sum(len(items) for items in self._snapshot.values()),
                )
            # 返回浅拷贝，调用方改动列表不影响缓存
            return {category: list(items) for category, items in self._snapshot.items()}

    def invalidate(self) -> None:
        with self._lock:
            self._snapshot = None

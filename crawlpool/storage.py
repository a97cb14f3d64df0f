import json
import threading
from typing import Dict
from pathlib import Path

from .types import CrawlResult


class JsonlWriter:
    def __init__(self, output_path: str, append: bool = False) -> None:
        self.output_path = output_path
        self._lock = threading.Lock()
        out_path = Path(self.output_path)
        if out_path.parent:
            out_path.parent.mkdir(parents=True, exist_ok=True)
        mode = "a" if append else "w"
        self._fh = out_path.open(mode, encoding="utf-8")

    def write(self, record: Dict) -> None:
        line = json.dumps(record, ensure_ascii=False)
        with self._lock:
            self._fh.write(line + "\n")
            self._fh.flush()

    def write_result(self, result: CrawlResult) -> int:
        """Write one record per committed page, then one per failure. Returns the record count."""
        for page in result.successful_pages:
            self.write(
                {
                    "url": page.url,
                    "ok": True,
                    "status": page.status_code,
                    "title": page.title,
                    "text": page.content,
                    "num_links": len(page.links),
                    "links": list(page.links),
                }
            )
        for failure in result.failures:
            self.write({"url": failure.url, "ok": False, "reason": failure.reason})
        return len(result.successful_pages) + len(result.failures)

    def close(self) -> None:
        with self._lock:
            if not self._fh.closed:
                self._fh.flush()
                self._fh.close()

    def __enter__(self) -> "JsonlWriter":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

"""请求追踪工具"""

import time
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Iterator, List, Any
from pydantic import BaseModel, Field


class StepLog(BaseModel):
    """单步执行日志"""
    step: str
    detail: Dict[str, Any] = Field(default_factory=dict)
    error: str | None = None
    latency_ms: float = 0
    timestamp: datetime


class TraceContext:
    """追踪上下文"""

    def __init__(self):
        self.trace_id: str = str(uuid.uuid4())
        self.steps: List[StepLog] = []
        self.start_time = datetime.now()

    def add_step(self, step: StepLog):
        """添加执行步骤"""
        self.steps.append(step)

    @contextmanager
    def step(self, name: str, **detail: Any) -> Iterator[Dict[str, Any]]:
        """
        记录一个执行步骤的耗时与错误

        Args:
            name: 步骤名称
            **detail: 附加信息（可在 with 块内继续补充）
        """
        started = time.perf_counter()
        log_entry = StepLog(step=name, detail=dict(detail), timestamp=datetime.now())
        try:
            yield log_entry.detail
        except Exception as e:
            log_entry.error = f"{type(e).__name__}: {e}"
            raise
        finally:
            log_entry.latency_ms = round((time.perf_counter() - started) * 1000, 3)
            self.add_step(log_entry)

    def to_dict(self) -> Dict[str, Any]:
        """转为字典"""
        return {
            "trace_id": self.trace_id,
            "steps": [
                {
                    "step": s.step,
                    "detail": s.detail,
                    "latency_ms": s.latency_ms,
                    "error": s.error,
                    "timestamp": s.timestamp.isoformat()
                }
                for s in self.steps
            ],
            "total_steps": len(self.steps),
            "duration_ms": (datetime.now() - self.start_time).total_seconds() * 1000
        }

"""
工具响应协议

每个工具调用恰好返回三种结果之一：
- Success: 数据是在页面确认无不利状态时提取的
- NeedsHuman: 原因 + 提示 + 截图路径 + 当前地址，人工可以从停下的地方接手
- Error: 与站点状态无关的故障（输入非法、内部异常），不附带截图
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from ..detector.types import DetectedProblem, ProblemReason


class Success(BaseModel):
    status: Literal["success"] = "success"
    data: Any = None


class NeedsHuman(BaseModel):
    status: Literal["needs_human"] = "needs_human"
    reason: ProblemReason
    hint: str
    screenshot_path: str | None = None
    current_url: str | None = None

    @classmethod
    def from_problem(cls, problem: DetectedProblem, current_url: str | None = None) -> NeedsHuman:
        return cls(
            reason=problem.reason,
            hint=problem.hint,
            screenshot_path=problem.evidence_path,
            current_url=current_url,
        )


class Error(BaseModel):
    status: Literal["error"] = "error"
    message: str


ToolOutcome = Annotated[Union[Success, NeedsHuman, Error], Field(discriminator="status")]

_outcome_adapter: TypeAdapter[ToolOutcome] = TypeAdapter(ToolOutcome)


def to_json(outcome: Success | NeedsHuman | Error) -> str:
    return outcome.model_dump_json(exclude_none=True)


def parse_outcome(raw: str | bytes | dict) -> Success | NeedsHuman | Error:
    """把 JSON 文本（或 dict）还原为三态结果之一"""
    if isinstance(raw, dict):
        return _outcome_adapter.validate_python(raw)
    return _outcome_adapter.validate_json(raw)

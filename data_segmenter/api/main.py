"""FastAPI 主应用"""

from typing import List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from data_segmenter import __version__
from data_segmenter.core.config import settings
from data_segmenter.core.constants import COLUMN_KINDS
from data_segmenter.engines.column_profiler import infer_columns
from data_segmenter.engines.filter_engine import (
    FilterValidationError,
    evaluate_filters,
    operators_for_kind
)
from data_segmenter.engines.segmentation import attach_segment_labels, run_segmentation
from data_segmenter.models.dataset import OperatorOption
from data_segmenter.models.response import (
    AuditInfo,
    DatasetPayload,
    FilterRequest,
    FilterResponse,
    LabelResponse,
    ProfileResponse,
    SegmentRequest,
    SegmentResponse
)
from data_segmenter.models.segment import SegmentationReport
from data_segmenter.utils.logger import log
from data_segmenter.utils.trace import TraceContext


# 创建应用
app = FastAPI(
    title="Data Segmenter",
    description="表格数据的列类型推断、条件过滤与分群服务",
    version=__version__,
    debug=settings.debug
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _columns_of(dataset: DatasetPayload) -> List[str]:
    """列清单为空时取首行的键"""
    if dataset.columns:
        return list(dataset.columns)
    return list(dataset.rows[0].keys()) if dataset.rows else []


def _bad_request(code: str, message: str, errors: List[str] | None = None) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={"code": code, "message": message, "errors": errors or []}
    )


@app.get("/")
async def root():
    """根路径"""
    return {
        "name": "Data Segmenter",
        "version": __version__,
        "status": "running"
    }


@app.get("/health")
async def health():
    """健康检查"""
    return {"status": "healthy"}


@app.get("/operators/{kind}", response_model=List[OperatorOption])
async def get_operators(kind: str):
    """获取列类型可用的过滤操作符"""
    if kind not in COLUMN_KINDS:
        raise HTTPException(status_code=404, detail=f"未知列类型: {kind}")
    return operators_for_kind(kind)


@app.post("/columns/profile", response_model=ProfileResponse)
def profile_columns(dataset: DatasetPayload):
    """推断各列类型"""
    trace = TraceContext()
    columns = _columns_of(dataset)
    with trace.step("infer_columns", rows=len(dataset.rows), columns=len(columns)):
        profiles = infer_columns(dataset.rows, columns)

    return ProfileResponse(
        columns=profiles,
        row_count=len(dataset.rows),
        audit=AuditInfo(**trace.to_dict())
    )


@app.post("/filter", response_model=FilterResponse)
def filter_rows(request: FilterRequest):
    """按条件过滤数据行（全部条件同时满足）"""
    log.info(f"收到过滤请求: {len(request.dataset.rows)} 行, {len(request.conditions)} 个条件")
    trace = TraceContext()
    rows = request.dataset.rows

    try:
        profiles = None
        if request.check_operators:
            with trace.step("infer_columns"):
                profiles = infer_columns(rows, _columns_of(request.dataset))
        with trace.step("evaluate_filters", conditions=len(request.conditions)) as detail:
            filtered = evaluate_filters(rows, request.conditions, profiles)
            detail["matched"] = len(filtered)
    except FilterValidationError as e:
        raise _bad_request("FILTER_VALIDATION_ERROR", str(e), e.errors)

    return FilterResponse(
        rows=filtered,
        row_count=len(filtered),
        total_rows=len(rows),
        audit=AuditInfo(**trace.to_dict())
    )


def _segment(request: SegmentRequest, trace: TraceContext):
    rows = request.dataset.rows
    try:
        if request.conditions:
            with trace.step("evaluate_filters", conditions=len(request.conditions)):
                rows = evaluate_filters(rows, request.conditions)
        with trace.step("segment", method=request.config.method) as detail:
            result = run_segmentation(rows, request.config, request.seed)
            detail["segments"] = len(result.segments)
    except FilterValidationError as e:
        raise _bad_request("FILTER_VALIDATION_ERROR", str(e), e.errors)
    except (ValueError, ValidationError) as e:
        log.error(f"分群失败: {e}")
        raise _bad_request("SEGMENTATION_ERROR", str(e))
    return rows, result


@app.post("/segment", response_model=SegmentResponse)
def segment_rows(request: SegmentRequest):
    """对（可选过滤后的）数据行分群"""
    log.info(
        f"收到分群请求: method={request.config.method}, "
        f"k={request.config.num_segments}, rows={len(request.dataset.rows)}"
    )
    trace = TraceContext()
    rows, result = _segment(request, trace)

    report = SegmentationReport(
        dataset=request.dataset.name,
        config=request.config,
        segments=result.segments
    )
    return SegmentResponse(
        report=report,
        assigned_rows=result.assigned_rows,
        total_rows=len(rows),
        audit=AuditInfo(**trace.to_dict())
    )


@app.post("/segment/labels", response_model=LabelResponse)
def label_rows(request: SegmentRequest):
    """分群并返回附加了分群名称的行副本"""
    trace = TraceContext()
    rows, result = _segment(request, trace)
    with trace.step("attach_labels", column=request.config.label_column):
        labelled = attach_segment_labels(rows, result, request.config.label_column)

    return LabelResponse(
        rows=labelled,
        label_column=request.config.label_column,
        segments=result.segments,
        audit=AuditInfo(**trace.to_dict())
    )


if __name__ == "__main__":
    import uvicorn

    log.info(f"启动服务: {settings.api_host}:{settings.api_port}")

    uvicorn.run(
        "data_segmenter.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )

"""
/api/generate 响应数据模型（字段以 camelCase 输出）
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorBody(CamelModel):
    """错误信息"""

    code: str
    message: str
    retry_after: int | None = None
    # 仅双 Provider 失败时携带
    primary_error: str | None = None
    fallback_error: str | None = None


class GenerateResponse(CamelModel):
    """生成响应：成功时携带 image，失败时携带 error"""

    success: bool
    image: str | None = None
    provider: str | None = None
    fallback_attempted: bool | None = None
    error: ErrorBody | None = None


class RateLimitInfo(CamelModel):
    max_per_ip: int
    max_total: int
    total_used: int
    window_hours: float

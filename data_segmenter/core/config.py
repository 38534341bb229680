"""系统配置管理"""

from pathlib import Path
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """系统配置"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # K-Means 配置
    kmeans_max_iterations: int = Field(100, ge=1)
    kmeans_init_scale: float = Field(100.0, gt=0)

    # 分群限制
    default_num_segments: int = 4
    max_num_segments: int = 50
    numeric_sample_size: int = 100

    # 过滤与规则限制
    max_filter_conditions: int = 20
    max_custom_rules: int = 20
    max_rule_length: int = 500

    # 服务器配置
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False

    # 日志配置
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # 确保日志目录存在
        if self.log_file is not None:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)


# 全局配置实例
settings = Settings()

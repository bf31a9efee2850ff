import os
import yaml
from pathlib import Path
from typing import Any, Dict, Tuple, Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

# 指定配置文件路径的环境变量（未设置时按运行环境自动选择）
CONFIG_FILE_ENV = "EPISODE_RECOGNIZER_CONFIG_FILE"


# 1. 为配置的不同部分创建 Pydantic 模型，提供类型提示和默认值

# 识别结果缓存配置
class CacheConfig(BaseModel):
    max_size: int = 10000               # 最大缓存条目数
    ttl_seconds: int = 24 * 60 * 60     # 条目存活时间（秒），默认 24 小时


# AI 辅助识别配置（OpenAI 兼容接口）
class AIConfig(BaseModel):
    enabled: bool = False
    api_url: str = ""                   # 如 https://api.openai.com/v1/chat/completions
    api_key: str = ""
    model: str = "gpt-3.5-turbo"
    timeout: float = 60.0               # 请求总超时（秒）
    connect_timeout: float = 30.0       # 连接超时（秒）
    max_retries: int = 3
    decision_threshold: float = 0.5     # 智能决策评分超过该值才调用 AI


# AI 接口限流配置
class RateLimitConfig(BaseModel):
    enabled: bool = True
    max_calls_per_minute: int = 20
    max_calls_per_hour: int = 200
    min_interval_seconds: float = 1.0   # 两次调用之间的最小间隔


class LogConfig(BaseModel):
    level: str = "INFO"
    log_dir: Optional[str] = None       # 为空时使用 config/logs


# 2. 创建一个自定义的配置源，用于从 YAML 文件加载设置
class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    def __init__(self, settings_cls: type[BaseSettings]):
        super().__init__(settings_cls)
        self.yaml_file = self._resolve_yaml_file()

    @staticmethod
    def _resolve_yaml_file() -> Path:
        explicit = os.getenv(CONFIG_FILE_ENV)
        if explicit:
            return Path(explicit)
        # 容器环境
        if Path("/.dockerenv").exists() or Path.cwd() == Path("/app"):
            return Path("/app/config/config.yml")
        # 源码运行环境
        return Path("config/config.yml")

    def get_field_value(self, field, field_name):
        return None, None, False

    def __call__(self) -> Dict[str, Any]:
        if not self.yaml_file.is_file():
            return {}
        with open(self.yaml_file, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}


# 3. 定义主设置类，它将聚合所有配置
class Settings(BaseSettings):
    cache: CacheConfig = CacheConfig()
    ai: AIConfig = AIConfig()
    rate_limit: RateLimitConfig = RateLimitConfig()
    log: LogConfig = LogConfig()

    # 为环境变量设置前缀，避免与系统变量冲突
    # 例如设置环境变量 EPISODE_RECOGNIZER_AI__API_KEY=sk-xxx
    model_config = SettingsConfigDict(
        env_prefix="EPISODE_RECOGNIZER_",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # 定义加载源的优先级:
        # 1. 构造参数 (最高)
        # 2. 环境变量
        # 3. .env 文件
        # 4. YAML 文件
        # 5. 文件密钥
        # 6. Pydantic 模型中的默认值 (最低)
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


settings = Settings()

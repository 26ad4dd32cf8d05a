"""
配置加载器：将 YAML 配置文件解析为 Pydantic 模型。
"""

import logging
from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, BeforeValidator, Field, field_validator, model_validator

from devdash.options import OptionMap

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".devdash.yml"
DEFAULT_REFRESH = 600
DEFAULT_FETCH_TIMEOUT = 10.0
DEFAULT_QUIT_KEY = "C-c"


def _stringify_options(value: Any) -> Any:
    """YAML 中的数字 / 布尔值统一转为字符串，保持 Option Map 为 str -> str。"""
    if value is None:
        return {}
    if not isinstance(value, dict):
        return value
    result = {}
    for k, v in value.items():
        if v is None:
            continue
        if isinstance(v, bool):
            v = "true" if v else "false"
        result[str(k)] = str(v)
    return result


OptionsField = Annotated[OptionMap, BeforeValidator(_stringify_options)]


# ── 通用配置 ──────────────────────────────────────────

class KeysConfig(BaseModel):
    quit: str = DEFAULT_QUIT_KEY


class GeneralConfig(BaseModel):
    refresh: int = Field(default=DEFAULT_REFRESH, gt=0)  # 秒
    fetch_timeout: float = Field(default=DEFAULT_FETCH_TIMEOUT, gt=0)  # 秒，单个组件抓取上限
    cache_file: Optional[str] = None  # 为空时只在内存中保留最近数据
    keys: KeysConfig = Field(default_factory=KeysConfig)


# ── 数据源配置 ────────────────────────────────────────

class ServiceConfig(BaseModel):
    def empty(self) -> bool:
        """所有字段都未配置时视为项目未使用该集成。"""
        return not any(getattr(self, name) for name in type(self).model_fields)


class GoogleAnalyticsConfig(ServiceConfig):
    property_id: str = ""
    access_token: str = ""  # 支持 ${ENV_VAR}


class SearchConsoleConfig(ServiceConfig):
    address: str = ""
    access_token: str = ""


class MonitorConfig(ServiceConfig):
    address: str = ""


class GithubConfig(ServiceConfig):
    token: str = ""
    owner: str = ""
    repository: str = ""


class ServicesConfig(BaseModel):
    google_analytics: GoogleAnalyticsConfig = Field(default_factory=GoogleAnalyticsConfig)
    google_search_console: SearchConsoleConfig = Field(default_factory=SearchConsoleConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)
    github: GithubConfig = Field(default_factory=GithubConfig)


# ── 布局配置 ──────────────────────────────────────────

class WidgetConfig(BaseModel):
    name: str
    theme: Optional[str] = None
    options: OptionsField = Field(default_factory=dict)

    @property
    def prefix(self) -> str:
        """组件名前缀，例如 "github.box_stars" -> "github"。"""
        return self.name.split(".", 1)[0]


class ColConfig(BaseModel):
    size: str
    elements: List[WidgetConfig] = Field(default_factory=list)

    @field_validator("size", mode="before")
    @classmethod
    def _size_to_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v


class ColEntry(BaseModel):
    col: ColConfig


class RowEntry(BaseModel):
    row: List[ColEntry] = Field(default_factory=list)


# ── 项目配置 ──────────────────────────────────────────

class ProjectConfig(BaseModel):
    name: str
    title_options: OptionsField = Field(default_factory=dict)
    themes: Dict[str, OptionsField] = Field(default_factory=dict)
    services: ServicesConfig = Field(default_factory=ServicesConfig)
    widgets: List[RowEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_themes(self) -> "ProjectConfig":
        for entry in self.widgets:
            for col in entry.row:
                for widget in col.col.elements:
                    if widget.theme and widget.theme not in self.themes:
                        raise ValueError(
                            f"widget '{widget.name}' uses unknown theme '{widget.theme}'"
                        )
        return self

    def widget_options(self, widget: WidgetConfig) -> OptionMap:
        """主题选项作为默认值，组件自身的选项覆盖主题。"""
        options: OptionMap = {}
        if widget.theme:
            options.update(self.themes[widget.theme])
        options.update(widget.options)
        return options

    def order_widgets(self) -> Tuple[List[List[List[WidgetConfig]]], List[List[str]]]:
        """
        按声明顺序返回 (rows, sizes)：
        rows[r][c] 为第 r 行第 c 列的组件列表 (已合并主题)，sizes[r][c] 为该列的尺寸 token。
        """
        rows: List[List[List[WidgetConfig]]] = []
        sizes: List[List[str]] = []
        for entry in self.widgets:
            row_widgets = []
            row_sizes = []
            for col in entry.row:
                row_widgets.append([
                    widget.model_copy(update={"options": self.widget_options(widget)})
                    for widget in col.col.elements
                ])
                row_sizes.append(col.col.size)
            rows.append(row_widgets)
            sizes.append(row_sizes)
        return rows, sizes


# ── 顶层配置 ──────────────────────────────────────────

class AppConfig(BaseModel):
    general: GeneralConfig = Field(default_factory=GeneralConfig)
    projects: List[ProjectConfig] = Field(default_factory=list)

    def refresh_time(self) -> int:
        return self.general.refresh

    def quit_key(self) -> str:
        return self.general.keys.quit


# ── Loading ───────────────────────────────────────────

def load_config(path: str | Path = DEFAULT_CONFIG_FILE) -> AppConfig:
    """
    Load and validate the dashboard configuration.

    Raises OSError, yaml.YAMLError or pydantic.ValidationError.
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as fp:
        raw = yaml.safe_load(fp) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: top level of the configuration must be a mapping")

    config = AppConfig.model_validate(raw)
    logger.info(f"已加载 {len(config.projects)} 个项目配置: {path}")
    return config

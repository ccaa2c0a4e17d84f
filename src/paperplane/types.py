"""
发布流程与构建号引擎共享的轻量类型定义。
"""

from dataclasses import dataclass

# 应用配置文件格式：
# - `app_config`：`app.config.ts` / `app.config.js`，仅按文本模式匹配，绝不执行。
# - `app_json`：`app.json`，按 JSON 解析。
FORMAT_SCRIPT = "app_config"
FORMAT_JSON = "app_json"

# 构建号所在位置标签。读取时产生，写回时原样使用，不可根据内容重新推断。
LOCATION_SCRIPT_IOS = "app_config:ios"
LOCATION_SCRIPT_ANY = "app_config:any"
LOCATION_JSON_IOS = "app_json:expo.ios"
LOCATION_JSON_EXPO = "app_json:expo"


@dataclass(frozen=True)
class ConfigFile:
    """被选中的应用配置文件。"""

    path: str
    format: str


@dataclass(frozen=True)
class BuildNumberReading:
    """一次构建号读取结果；`value` 与 `location` 同时为 `None` 表示未找到。"""

    value: int | None = None
    location: str | None = None

    @property
    def found(self) -> bool:
        return self.value is not None and self.location is not None

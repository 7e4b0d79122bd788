"""
Tool catalogue - the closed set of tools advertised to the model.

Each tool has a ToolName, a description and a Pydantic argument model.
The JSON schema sent to the model is derived from the argument model, and
the same model validates the arguments the model sends back.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, Field

from ..styles import StyleRegistry


class UnknownToolError(ValueError):
    """Raised when the model names a tool that is not in the catalogue."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class ToolArgumentError(ValueError):
    """Raised when tool arguments are not a JSON object."""


class ToolName(str, Enum):
    ANALYZE_ICON_MAIN_BODY = "analyze_icon_main_body"
    GENERATE_ICON_BY_MAIN_BODY = "generate_icon_by_main_body"
    GENERATE_ICON_SET = "generate_icon_set"
    SAVE_ICON = "save_icon"
    SEARCH_ICONS = "search_icons"
    GET_RECENT_ICONS = "get_recent_icons"
    DELETE_ICON = "delete_icon"


# =============================================================================
# Argument Models
# =============================================================================

class AnalyzeIconMainBodyArgs(BaseModel):
    userPrompt: str = Field(..., description='用户关于图标的描述，如"安全防护"、"云存储"、"金融理财"')


class GenerateIconByMainBodyArgs(BaseModel):
    mainBody: str = Field(..., description='主体元素，如"盾牌"、"云朵"、"硬币"')
    style: str = Field(..., description="风格 ID")


class GenerateIconSetArgs(BaseModel):
    mainBody: str = Field(..., description='主体元素，如"盾牌"、"云朵"、"硬币"')


class SaveIconArgs(BaseModel):
    name: str = Field(..., description="图标名称")
    svgContent: str = Field(..., description="SVG 代码")
    prompt: str = Field(..., description="生成时的提示词")
    style: str = Field(..., description="图标风格")


class SearchIconsArgs(BaseModel):
    keyword: str = Field(..., description="图标名称关键词")


class GetRecentIconsArgs(BaseModel):
    limit: int = Field(5, ge=1, le=50, description="返回数量")


class DeleteIconArgs(BaseModel):
    iconId: str = Field(..., description="图标 ID")


@dataclass(frozen=True)
class ToolSpec:
    name: ToolName
    description: str
    args_model: Type[BaseModel]


TOOL_SPECS: Dict[ToolName, ToolSpec] = {
    spec.name: spec for spec in [
        ToolSpec(
            ToolName.ANALYZE_ICON_MAIN_BODY,
            "分析用户的抽象描述，提取出具体的视觉主体元素。这是生成图标的第一步，必须先分析主体再生成图标。",
            AnalyzeIconMainBodyArgs,
        ),
        ToolSpec(
            ToolName.GENERATE_ICON_BY_MAIN_BODY,
            "根据主体元素生成一个指定风格的图标。需要先调用 analyze_icon_main_body 获取主体元素。",
            GenerateIconByMainBodyArgs,
        ),
        ToolSpec(
            ToolName.GENERATE_ICON_SET,
            "根据主体元素，一次性生成多种不同风格的图标。这是最常用的生成方式。",
            GenerateIconSetArgs,
        ),
        ToolSpec(ToolName.SAVE_ICON, "保存图标到数据库", SaveIconArgs),
        ToolSpec(ToolName.SEARCH_ICONS, "按名称搜索已保存的图标", SearchIconsArgs),
        ToolSpec(ToolName.GET_RECENT_ICONS, "获取最近保存的图标", GetRecentIconsArgs),
        ToolSpec(ToolName.DELETE_ICON, "删除一个已保存的图标", DeleteIconArgs),
    ]
}


def parse_tool_name(name: str) -> ToolName:
    """Resolve a model-supplied tool name or raise UnknownToolError."""
    try:
        return ToolName(name)
    except ValueError:
        raise UnknownToolError(name) from None


def parse_tool_arguments(raw: Optional[str]) -> Dict[str, Any]:
    """Decode the JSON argument string of a tool call."""
    if not raw:
        return {}
    try:
        args = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ToolArgumentError(f"Arguments are not valid JSON: {e}") from e
    if not isinstance(args, dict):
        raise ToolArgumentError("Arguments must be a JSON object")
    return args


def _parameters_schema(args_model: Type[BaseModel]) -> Dict[str, Any]:
    schema = args_model.model_json_schema()
    schema.pop("title", None)
    for prop in schema.get("properties", {}).values():
        prop.pop("title", None)
    return schema


def tool_definitions(registry: Optional[StyleRegistry] = None) -> List[Dict[str, Any]]:
    """
    Function-calling definitions for every tool in the catalogue.
    
    When a registry is given, the single-icon style argument is restricted
    to the registered style ids.
    """
    definitions = []
    for spec in TOOL_SPECS.values():
        parameters = _parameters_schema(spec.args_model)
        if registry is not None and spec.name == ToolName.GENERATE_ICON_BY_MAIN_BODY:
            parameters["properties"]["style"]["enum"] = registry.ids()
        definitions.append({
            "type": "function",
            "function": {
                "name": spec.name.value,
                "description": spec.description,
                "parameters": parameters,
            },
        })
    return definitions

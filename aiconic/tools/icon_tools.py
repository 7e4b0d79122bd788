"""
Icon Tools - the operations the icon agent can call.

Every tool is an async method returning a plain dict that is both sent to
the client (via stream events) and fed back to the model as the tool
result. Tools never raise: model, database and timeout failures become
{"success": False, "error": "..."} so one failed tool cannot abort a turn.

Tools:
- analyze_subject: extract four ranked visual subjects from a request
- generate_icon: draw one icon in one style
- generate_icon_set: draw one subject in several styles concurrently
- persist_icon / search_icons / list_recent_icons / delete_icon: icon CRUD
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from ..db.store import IconStore
from ..styles import StyleRegistry, UnknownStyleError
from .icon_synthesis import IconSynthesizer

logger = logging.getLogger(__name__)

SUBJECT_COUNT = 4

ERROR_NO_SUBJECTS = "无法分析出主体元素"
ERROR_ANALYSIS_FAILED = "分析失败，请重试"
ERROR_GENERATION_FAILED = "生成失败"
ERROR_TIMEOUT = "请求超时"
ERROR_NO_DATABASE = "数据库未配置"
ERROR_ICON_NOT_FOUND = "图标不存在"


# =============================================================================
# Prompts
# =============================================================================

ANALYZE_SYSTEM_PROMPT = """你是图标设计专家。根据用户的抽象概念，分析出 4 个最适合的视觉主体元素。

规则:
1. 选择简洁、易识别的几何形状
2. 每个主体元素用 2-4 个字描述
3. 按视觉表现力排序
4. 返回 JSON 格式

示例:
用户: "安全防护"
输出: {"mainBodies": ["盾牌", "锁", "钥匙", "城墙"], "reasoning": "安全概念最直观的视觉符号"}

用户: "云存储"
输出: {"mainBodies": ["云朵", "服务器", "上传箭头", "文件夹"], "reasoning": "云和存储的组合意象"}

用户: "金融理财"
输出: {"mainBodies": ["硬币", "金条", "钱包", "增长曲线"], "reasoning": "财富和增值的视觉符号"}"""

ANALYZE_USER_PROMPT = '分析 "{user_prompt}" 的视觉主体元素:'


class SubjectAnalysis(BaseModel):
    """Structured reply of the subject analysis call."""
    mainBodies: List[str] = Field(default_factory=list, description="Ranked visual subjects")
    reasoning: Optional[str] = Field(None, description="Why these subjects fit")


# =============================================================================
# Toolbox
# =============================================================================

class IconToolbox:
    """
    Implementation of every agent tool.
    
    The store is optional: without a database the persistence tools
    report a failure instead of raising.
    """
    
    def __init__(
        self,
        client: Any,
        registry: StyleRegistry,
        synthesizer: IconSynthesizer,
        store: Optional[IconStore] = None,
        analysis_model: str = "gpt-4o-mini",
        analysis_temperature: float = 0.5,
        analysis_max_tokens: int = 200,
        icon_set_styles: Optional[List[str]] = None,
        llm_timeout_seconds: float = 60.0,
        db_timeout_seconds: float = 10.0,
    ):
        self.client = client
        self.registry = registry
        self.synthesizer = synthesizer
        self.store = store
        self.analysis_model = analysis_model
        self.analysis_temperature = analysis_temperature
        self.analysis_max_tokens = analysis_max_tokens
        self.icon_set_styles = list(icon_set_styles or ["appstore", "material", "fluent", "neon"])
        self.llm_timeout_seconds = llm_timeout_seconds
        self.db_timeout_seconds = db_timeout_seconds
    
    # -------------------------------------------------------------------------
    # Model-backed tools
    # -------------------------------------------------------------------------
    
    async def analyze_subject(self, user_prompt: str) -> Dict[str, Any]:
        """
        Distill an abstract request into concrete visual subjects.
        
        Malformed JSON or an empty list fails immediately without retry.
        More than four subjects are truncated to the top four.
        """
        logger.info(f"[analyze_subject] prompt: {user_prompt!r}")
        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.analysis_model,
                    messages=[
                        {"role": "system", "content": ANALYZE_SYSTEM_PROMPT},
                        {"role": "user", "content": ANALYZE_USER_PROMPT.format(user_prompt=user_prompt)},
                    ],
                    temperature=self.analysis_temperature,
                    max_tokens=self.analysis_max_tokens,
                    response_format={"type": "json_object"},
                ),
                timeout=self.llm_timeout_seconds,
            )
            content = "{}"
            if response.choices:
                content = response.choices[0].message.content or "{}"
            analysis = SubjectAnalysis.model_validate(json.loads(content))
        except asyncio.TimeoutError:
            logger.error(f"[analyze_subject] timed out after {self.llm_timeout_seconds}s")
            return {"success": False, "error": ERROR_TIMEOUT}
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"[analyze_subject] malformed model reply: {e}")
            return {"success": False, "error": ERROR_ANALYSIS_FAILED}
        except Exception as e:
            logger.error(f"[analyze_subject] model call failed: {e}")
            return {"success": False, "error": ERROR_ANALYSIS_FAILED}
        
        subjects = [s.strip() for s in analysis.mainBodies if s and s.strip()]
        if not subjects:
            return {"success": False, "error": ERROR_NO_SUBJECTS}
        
        subjects = subjects[:SUBJECT_COUNT]
        logger.info(f"[analyze_subject] subjects: {', '.join(subjects)}")
        return {
            "success": True,
            "mainBodies": subjects,
            "reasoning": analysis.reasoning,
        }
    
    async def generate_icon(self, subject: str, style_id: str) -> Dict[str, Any]:
        """Draw a single icon."""
        plugin = self.registry.get(style_id)
        if plugin is None:
            return {"success": False, "error": str(UnknownStyleError(style_id))}
        
        svg = await self.synthesizer.synthesize(subject, style_id)
        if not svg:
            return {"success": False, "error": ERROR_GENERATION_FAILED}
        
        return {
            "success": True,
            "svg": svg,
            "mainBody": subject,
            "style": style_id,
            "styleName": plugin.config.name,
        }
    
    async def generate_icon_set(
        self,
        subject: str,
        style_ids: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """
        Draw one subject in several styles at once.
        
        Styles whose synthesis fails are dropped; the set succeeds when at
        least one icon was produced.
        """
        style_ids = list(style_ids or self.icon_set_styles)
        logger.info(f"[generate_icon_set] subject: {subject}, styles: {style_ids}")
        
        results = await asyncio.gather(
            *(self._synthesize_for_set(subject, style_id) for style_id in style_ids)
        )
        icons = [icon for icon in results if icon is not None]
        
        if not icons:
            return {"success": False, "error": ERROR_GENERATION_FAILED}
        
        logger.info(f"[generate_icon_set] produced {len(icons)}/{len(style_ids)} icons")
        return {"success": True, "icons": icons}
    
    async def _synthesize_for_set(self, subject: str, style_id: str) -> Optional[Dict[str, Any]]:
        try:
            svg = await self.synthesizer.synthesize(subject, style_id)
        except UnknownStyleError as e:
            logger.warning(f"[generate_icon_set] skipping style: {e}")
            return None
        except Exception as e:
            logger.error(f"[generate_icon_set] style {style_id} failed: {e}")
            return None
        if not svg:
            return None
        config = self.registry.require(style_id).config
        return {
            "svg": svg,
            "style": style_id,
            "styleName": config.name,
            "platform": config.platform,
        }
    
    # -------------------------------------------------------------------------
    # Persistence tools
    # -------------------------------------------------------------------------
    
    async def _call_store(self, tool_name: str, method: str, *args: Any, **kwargs: Any):
        """
        Run a blocking IconStore method in a worker thread with a timeout.

        Returns:
            Tuple of (value, error_result). On success error_result is None.
        """
        if self.store is None:
            return None, {"success": False, "error": ERROR_NO_DATABASE}
        operation = getattr(self.store, method)
        try:
            value = await asyncio.wait_for(
                asyncio.to_thread(operation, *args, **kwargs),
                timeout=self.db_timeout_seconds,
            )
            return value, None
        except asyncio.TimeoutError:
            logger.error(f"[{tool_name}] database call timed out")
            return None, {"success": False, "error": ERROR_TIMEOUT}
        except Exception as e:
            logger.error(f"[{tool_name}] database call failed: {e}")
            return None, {"success": False, "error": f"{tool_name} failed: {e}"}
    
    async def persist_icon(self, name: str, svg_markup: str, prompt: str, style_id: str) -> Dict[str, Any]:
        icon, error = await self._call_store(
            "save_icon", "save_icon",
            name=name, svg_content=svg_markup, prompt=prompt, style=style_id,
        )
        if error:
            return error
        return {
            "success": True,
            "iconId": icon["id"],
            "message": f'图标 "{name}" 已保存',
        }
    
    async def search_icons(self, keyword: str) -> Dict[str, Any]:
        icons, error = await self._call_store(
            "search_icons", "search_icons", keyword, limit=10,
        )
        if error:
            return error
        return {
            "success": True,
            "count": len(icons),
            "icons": [{"id": i["id"], "name": i["name"], "style": i["style"]} for i in icons],
        }
    
    async def list_recent_icons(self, limit: int = 5) -> Dict[str, Any]:
        icons, error = await self._call_store(
            "get_recent_icons", "recent_icons", limit=limit,
        )
        if error:
            return error
        return {
            "success": True,
            "icons": [
                {"id": i["id"], "name": i["name"], "style": i["style"], "svgContent": i["svgContent"]}
                for i in icons
            ],
        }
    
    async def delete_icon(self, icon_id: str) -> Dict[str, Any]:
        deleted, error = await self._call_store(
            "delete_icon", "delete_icon", icon_id,
        )
        if error:
            return error
        if not deleted:
            return {"success": False, "error": ERROR_ICON_NOT_FOUND}
        return {"success": True, "message": "图标已删除"}

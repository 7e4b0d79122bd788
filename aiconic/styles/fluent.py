"""
Fluent style: crisp outlines lit from the top-left with an isometric feel.
"""

from .types import StyleColors, StyleConfig, StylePlugin

CONFIG = StyleConfig(
    id="fluent",
    name="Fluent",
    platform="Microsoft",
    description="清晰轮廓 + 左上光源 + 等距插画感",
    colors=StyleColors(
        primary="#0078D4",
        secondary="#50E6FF",
        background="#F3F3F3",
        accent="#FFB900",
    ),
)


def build_svg(icon_content: str, colors: StyleColors) -> str:
    return f"""<svg viewBox="0 0 120 120" xmlns="http://www.w3.org/2000/svg">
  <defs>
    <linearGradient id="bg-fluent" x1="0%" y1="0%" x2="100%" y2="100%">
      <stop offset="0%" stop-color="#FAFAFA"/>
      <stop offset="100%" stop-color="{colors.background}"/>
    </linearGradient>
    <linearGradient id="light-fluent" x1="0%" y1="0%" x2="100%" y2="100%">
      <stop offset="0%" stop-color="#fff" stop-opacity="0.8"/>
      <stop offset="50%" stop-color="#fff" stop-opacity="0"/>
    </linearGradient>
    <filter id="shadow-fluent" x="-10%" y="-10%" width="130%" height="140%">
      <feDropShadow dx="2" dy="4" stdDeviation="3" flood-color="#000" flood-opacity="0.15"/>
    </filter>
    <filter id="outline-fluent" x="-5%" y="-5%" width="110%" height="110%">
      <feMorphology in="SourceAlpha" operator="dilate" radius="1" result="expanded"/>
      <feFlood flood-color="{colors.primary}" flood-opacity="0.3"/>
      <feComposite in2="expanded" operator="in"/>
      <feMerge>
        <feMergeNode/>
        <feMergeNode in="SourceGraphic"/>
      </feMerge>
    </filter>
  </defs>
  <rect x="10" y="10" width="100" height="100" rx="16" fill="url(#bg-fluent)" filter="url(#shadow-fluent)"/>
  <rect x="10" y="10" width="100" height="100" rx="16" fill="url(#light-fluent)"/>
  <g transform="translate(60, 60)">
    <g transform="translate(-60, -60)" filter="url(#outline-fluent)">{icon_content}</g>
  </g>
</svg>"""


def get_prompt(subject: str, colors: StyleColors) -> str:
    return f"""你是 Microsoft Fluent 设计师。绘制 "{subject}" 的插画风格图形。

风格要求：
- 主体用 {colors.primary}，高光用 {colors.secondary}
- 清晰的 2px 轮廓感（用色块对比实现）
- 左上角是光源方向，右下较暗
- 可用等距视角增加立体感
- 【重要】主体必须居中在坐标 (60, 60) 附近

规则:
1. 只输出 SVG 图形元素 (path, circle, rect, ellipse)
2. 图形中心点在 (60, 60)，范围 35-85
3. 主体占图标 60-70% 面积
4. 直接输出代码，无解释

示例 - 文档:
<rect x="42" y="35" width="35" height="45" rx="3" fill="{colors.primary}"/>
<rect x="44" y="37" width="31" height="10" fill="{colors.secondary}" opacity="0.5"/>
<rect x="47" y="52" width="25" height="3" rx="1" fill="#fff" opacity="0.8"/>
<rect x="47" y="58" width="20" height="3" rx="1" fill="#fff" opacity="0.6"/>
<rect x="47" y="64" width="15" height="3" rx="1" fill="#fff" opacity="0.4"/>"""


PLUGIN = StylePlugin(config=CONFIG, build_svg=build_svg, get_prompt=get_prompt)

"""
App Store style: a digital still life with soft light, a pale backdrop and a faint drop shadow.
"""

from .types import StyleColors, StyleConfig, StylePlugin

CONFIG = StyleConfig(
    id="appstore",
    name="数字静物",
    platform="App Store",
    description="柔光 + 浅背景 + 微投影，如同桌面静物摄影",
    colors=StyleColors(
        primary="#007AFF",
        secondary="#5856D6",
        background="#F5F5F7",
        accent="#FFFFFF",
    ),
)


def build_svg(icon_content: str, colors: StyleColors) -> str:
    return f"""<svg viewBox="0 0 120 120" xmlns="http://www.w3.org/2000/svg">
  <defs>
    <linearGradient id="bg-appstore" x1="0%" y1="0%" x2="0%" y2="100%">
      <stop offset="0%" stop-color="#FFFFFF"/>
      <stop offset="100%" stop-color="{colors.background}"/>
    </linearGradient>
    <filter id="softLight-appstore" x="-20%" y="-20%" width="140%" height="140%">
      <feGaussianBlur in="SourceAlpha" stdDeviation="3" result="blur"/>
      <feOffset in="blur" dx="0" dy="2" result="shadow"/>
      <feFlood flood-color="#000" flood-opacity="0.08"/>
      <feComposite in2="shadow" operator="in"/>
      <feMerge>
        <feMergeNode/>
        <feMergeNode in="SourceGraphic"/>
      </feMerge>
    </filter>
    <filter id="glow-appstore" x="-30%" y="-30%" width="160%" height="160%">
      <feGaussianBlur stdDeviation="4" result="blur"/>
      <feFlood flood-color="{colors.primary}" flood-opacity="0.15"/>
      <feComposite in2="blur" operator="in"/>
      <feMerge>
        <feMergeNode/>
        <feMergeNode in="SourceGraphic"/>
      </feMerge>
    </filter>
  </defs>
  <rect x="10" y="10" width="100" height="100" rx="22" fill="url(#bg-appstore)"/>
  <rect x="10" y="10" width="100" height="35" rx="22" fill="#fff" opacity="0.6"/>
  <g transform="translate(60, 60)">
    <g transform="translate(-60, -60)" filter="url(#softLight-appstore)">
      <g filter="url(#glow-appstore)">{icon_content}</g>
    </g>
  </g>
</svg>"""


def get_prompt(subject: str, colors: StyleColors) -> str:
    return f"""你是 Apple 设计师。绘制 "{subject}" 的静物风格图形。

风格要求：
- 主体用品牌色 {colors.primary}，带柔和渐变
- 无描边，用色彩明暗区分层次
- 简化细节，保留可识别轮廓
- 添加微弱的立体感（用浅色表示高光面）
- 【重要】主体必须居中在坐标 (60, 60) 附近

规则:
1. 只输出 SVG 图形元素 (path, circle, rect, ellipse)
2. 图形中心点在 (60, 60)，范围 35-85
3. 主体占图标 60-70% 面积
4. 直接输出代码，无解释

示例 - 相机镜头:
<circle cx="60" cy="60" r="24" fill="{colors.primary}"/>
<circle cx="60" cy="60" r="18" fill="#fff"/>
<circle cx="60" cy="60" r="12" fill="{colors.secondary}"/>
<ellipse cx="55" cy="55" rx="4" ry="3" fill="#fff" opacity="0.6"/>"""


PLUGIN = StylePlugin(config=CONFIG, build_svg=build_svg, get_prompt=get_prompt)

"""Reference mission content for the Yongchun Pi wetland field trip.

(c) Mike Casale 2025.
Licensed under the MIT License.
See LICENSE file for details.
"""

from __future__ import annotations as _annotations

# =============================================================================
# Section 1: Imports
# =============================================================================
# Standard library (alphabetical)
from typing import Final

# Local imports (core first, then alphabetical)
from .core.models import (
    ChoicePairCheck,
    Coordinate,
    FreeTextCheck,
    KeywordCheck,
    Mission,
    NumericRangeCheck,
    Quiz,
)

# =============================================================================
# Section 2: Module Exports
# =============================================================================
__all__ = ("MAIN_MISSIONS", "SIDE_MISSIONS", "load_missions", "fragments_total")

# =============================================================================
# Section 3: Constants
# =============================================================================
MAIN_MISSIONS: Final[tuple[Mission, ...]] = (
    Mission(
        id="1",
        title="Mission 01: 四獸山連線",
        description="透過方位與地形觀察理解永春陂是被四獸山包圍的山谷窪地。",
        target=Coordinate(lat=25.032647652556317, lng=121.58009862209747),
        difficulty="Novice",
        xp_reward=300,
        rank_requirement="Cadet",
        fragment_id=0,
        kind="main",
        quiz=Quiz(
            question="請對照Mapy，填入四獸山的高度",
            checks=(
                NumericRangeCheck(
                    id="heights",
                    bands={
                        "tiger": (135, 145),
                        "leopard": (139, 143),
                        "lion": (147, 153),
                        "elephant": (180, 188),
                    },
                ),
                KeywordCheck(
                    id="reasoning",
                    field="reason",
                    groups=(("高", "山"), ("低", "窪", "水", "凹")),
                ),
            ),
        ),
        prompt_hint="Overlay digital measurement grid on mountain peaks, visualize hydrological flow into the valley",
    ),
    Mission(
        id="2",
        title="Mission 02: 岩層解密",
        description="請先回答地質問題，驗證所在地層後，再進行岩層採樣分析。",
        target=Coordinate(lat=25.028155021059753, lng=121.57924699325368),
        difficulty="Geologist",
        xp_reward=300,
        rank_requirement="Scout",
        fragment_id=1,
        kind="main",
        quiz=Quiz(
            question="請問我們現在在哪一層？",
            checks=(FreeTextCheck(id="stratum", field="answer", expected="南港層", alternates=("南港",)),),
        ),
        evidence_instruction="請拍攝所收集到的砂岩照片，並描述它的樣子。例如：羽毛狀、貝殼狀、放射狀",
        prompt_hint="描述岩石特徵 (例如：羽毛狀節理)",
    ),
    Mission(
        id="3",
        title="Mission 03: 等高線挑戰",
        description="請打開Mapy並截圖，在截圖上畫出爬上永春崗平台的路線，同時觀察Mapy裡的等高線圖",
        target=Coordinate(lat=25.029229726415355, lng=121.57698592023897),
        difficulty="Expert",
        xp_reward=300,
        rank_requirement="Ranger",
        fragment_id=2,
        kind="main",
        quiz=Quiz(
            question="爬完的感受？",
            checks=(
                ChoicePairCheck(
                    id="slope",
                    first_field="density",
                    second_field="feeling",
                    first_options=("密集", "稀疏"),
                    second_options=("累", "不累"),
                    accepted=(("密集", "累"), ("稀疏", "不累")),
                ),
            ),
        ),
        evidence_instruction="上傳您的Mapy截圖，並繪製路線。",
        prompt_hint="Project holographic red contour lines onto the terrain, high density on steep slopes",
    ),
)

SIDE_MISSIONS: Final[tuple[Mission, ...]] = (
    Mission(
        id="s1",
        title="擋土牆獵人",
        description=(
            "校園或步道周邊有許多保護邊坡的擋土牆。請尋找擋土牆，觀察其結構與排水狀況。"
            "良好的排水設施對於防止邊坡滑動至關重要。"
        ),
        target=None,
        difficulty="Novice",
        xp_reward=50,
        rank_requirement="Freelancer",
        fragment_id=None,
        kind="side",
        evidence_instruction="請拍攝擋土牆正面照片，需清楚呈現排水設施或植生狀況。",
        prompt_hint="Analyze retaining wall structure, highlight drainage holes in red, check for structural cracks",
    ),
)


# =============================================================================
# Section 12: Functions
# =============================================================================
def load_missions() -> tuple[Mission, ...]:
    """Return every mission of the reference content, main missions first."""
    return MAIN_MISSIONS + SIDE_MISSIONS


def fragments_total(missions: tuple[Mission, ...] | list[Mission]) -> int:
    """Number of distinct fragments that can be collected."""
    return len({m.fragment_id for m in missions if m.awards_fragment})

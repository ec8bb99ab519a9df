"""Fixed inquiry-competency rubric shared by the prompt, aggregation and editor."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Tuple

MIN_SCORE = 3


class Category(str, Enum):
    """Top-level competency groups. Category B items are scored out of 5, the rest out of 7."""
    A = "A"
    B = "B"
    C = "C"

    @property
    def display_name(self) -> str:
        return CATEGORY_NAMES[self]

    @property
    def max_item_score(self) -> int:
        return 5 if self is Category.B else 7


CATEGORY_NAMES = {
    Category.A: "탐구력",
    Category.B: "자기주도성",
    Category.C: "창의적 문제해결",
}


def category_for_key(key: str) -> Optional[Category]:
    """Return the category named by the key's first character, or None."""
    if not key:
        return None
    try:
        return Category(key[0])
    except ValueError:
        return None


@dataclass(frozen=True)
class RubricItem:
    """One evaluation criterion."""
    key: str
    label: str

    @property
    def category(self) -> Category:
        category = category_for_key(self.key)
        if category is None:
            raise ValueError(f"Rubric key {self.key!r} does not start with a known category")
        return category

    @property
    def max_score(self) -> int:
        return self.category.max_item_score

    @property
    def min_score(self) -> int:
        return MIN_SCORE

    @property
    def short_label(self) -> str:
        """Label without any parenthetical clarifier."""
        return self.label.split('(')[0].strip() or self.label


@dataclass(frozen=True)
class Rubric:
    """Ordered, read-only collection of rubric items."""
    items: Tuple[RubricItem, ...]

    def __post_init__(self):
        keys = [item.key for item in self.items]
        if len(set(keys)) != len(keys):
            raise ValueError("Rubric keys must be unique")
        for key in keys:
            if category_for_key(key) is None:
                raise ValueError(f"Rubric key {key!r} does not start with a known category")
        object.__setattr__(self, '_by_key', {item.key: item for item in self.items})

    def __iter__(self) -> Iterator[RubricItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def get(self, key: str) -> Optional[RubricItem]:
        return self._by_key.get(key)

    def all_keys(self) -> Tuple[str, ...]:
        return tuple(item.key for item in self.items)

    def label_of(self, key: str) -> str:
        return self._by_key[key].label

    def short_label_of(self, key: str) -> str:
        return self._by_key[key].short_label

    def category_of(self, key: str) -> Category:
        return self._by_key[key].category

    def max_score_of(self, key: str) -> int:
        """Max score for a key. Keys outside the rubric fall back to the category rule."""
        item = self._by_key.get(key)
        if item is not None:
            return item.max_score
        category = category_for_key(key)
        if category is None:
            raise KeyError(key)
        return category.max_item_score

    def min_score_of(self, key: str) -> int:
        # TODO: move the floor onto RubricItem if a rubric ever needs a category-specific minimum
        return MIN_SCORE

    def items_in(self, category: Category) -> Tuple[RubricItem, ...]:
        return tuple(item for item in self.items if item.category is category)


DEFAULT_RUBRIC = Rubric(items=(
    # Category A: 탐구력 (7-point items)
    RubricItem('A1_구체적_증명', '탐구과정 증명의 구체성'),
    RubricItem('A2_탐구_동기', '지적 호기심과 탐구 동기'),
    RubricItem('A3_자료_활용', '자료 활용 능력의 우수성'),
    RubricItem('A4_엮어_읽기', '주제 확장 및 엮어 읽기'),
    RubricItem('A5_횡적_연계', '탐구의 횡적 연계성'),
    RubricItem('A6_종적_연계', '탐구의 종적 연계성'),
    RubricItem('A7_오차_실패_분석', '오차 및 실패 원인 분석'),
    RubricItem('A8_우수성_키워드', '탐구 우수성 키워드 제시'),
    RubricItem('A9_심화_경험', '심화 탐구 활동 참여 경험'),

    # Category B: 자기주도성 (5-point items)
    RubricItem('B1_칭찬_남발_배제', '의미 없는 칭찬 나열 배제'),
    RubricItem('B2_내용_중복_배제', '타 교과 내용과 중복 배제'),
    RubricItem('B3_단순_서술_배제', '단순 보고서식 서술 배제'),
    RubricItem('B4_선생님께_질문', '질문을 통한 적극적 문제 해결'),
    RubricItem('B5_자기_성찰', '성찰을 통한 발전 노력'),

    # Category C: 창의적 문제해결 (7-point items)
    RubricItem('C1_일반적_서술_배제', '상투적, 일반적 서술 지양'),
    RubricItem('C2_미사여구_배제', '불필요한 미사여구 자제'),
    RubricItem('C3_전문용어_남발_배제', '불필요한 전문용어 남발 배제'),
    RubricItem('C4_지식_활용_문제해결', '교과 지식 활용 문제 해결'),
    RubricItem('C5_주도적_문제해결', '주도적 문제 발견 및 해결'),
    RubricItem('C6_실생활_문제해결', '학교 생활 속 문제 해결 노력'),
))

"""
Text-derived fallback for the idea record.

Used when the free-text provider fails or its output cannot be extracted.
Everything here is deterministic: the same input always yields the same record.
"""

import re
from collections import Counter
from dataclasses import dataclass
from typing import Callable, List, Tuple

from matura.models.blueprint import IdeaRecord
from matura.utils.logger import logger

_KANJI = f"{chr(0x3400)}-{chr(0x4DBF)}{chr(0x4E00)}-{chr(0x9FFF)}{chr(0x3005)}{chr(0x3006)}"
_KATAKANA = f"{chr(0x30A0)}-{chr(0x30FF)}"
_HIRAGANA = f"{chr(0x3040)}-{chr(0x309F)}"

# Runs of a single script: kanji, katakana, hiragana, or any other word characters
_TOKEN = re.compile(
    rf"[{_KANJI}]+|[{_KATAKANA}]+|[{_HIRAGANA}]+|[^\W_{_HIRAGANA}{_KATAKANA}{_KANJI}]+"
)
_HIRAGANA_ONLY = re.compile(rf"[{_HIRAGANA}]+")

STOP_WORDS = frozenset({
    # Japanese particles and function words
    "の", "を", "に", "は", "が", "で", "と", "から", "まで", "より", "や", "も",
    "する", "したい", "ための", "ような", "こと", "もの", "など",
    # Generic product nouns that say nothing about the idea
    "アプリ", "アプリケーション", "ページ", "サイト", "システム", "サービス", "ツール",
    # English
    "a", "an", "the", "and", "or", "for", "to", "of", "in", "on", "with", "that",
    "is", "are", "be", "my", "our", "your", "i", "we", "want", "app", "application",
    "page", "site", "system", "tool", "service", "create", "make", "build",
})

KEY_TERM_LIMIT = 5


def tokenize(text: str) -> List[str]:
    return [token.lower() for token in _TOKEN.findall(text or "")]


def extract_key_terms(text: str, limit: int = KEY_TERM_LIMIT) -> List[str]:
    """Most frequent content terms; ties keep their first occurrence order."""
    terms = [
        token for token in tokenize(text)
        if len(token) > 1 and token not in STOP_WORDS and not _HIRAGANA_ONLY.fullmatch(token)
    ]
    return [term for term, _ in Counter(terms).most_common(limit)]


def _keywords(*words: str) -> Callable[[str], object]:
    # ASCII words must stand alone ("play" but not "display"), even next to Japanese text
    parts = [rf"(?<![a-z]){re.escape(w)}(?![a-z])" if w.isascii() else re.escape(w) for w in words]
    return re.compile("|".join(parts), re.IGNORECASE).search


# Ordered (predicate, category) rules; first match wins
CATEGORY_RULES: List[Tuple[Callable[[str], object], str]] = [
    (_keywords("レシピ", "料理", "調理", "献立", "recipe", "recipes", "cooking", "cook"), "creative"),
    (_keywords("ゲーム", "遊び", "エンタメ", "映画", "game", "games", "gaming", "play"), "entertainment"),
    (_keywords("学習", "勉強", "教育", "授業", "資格", "learning", "learn", "study", "course"), "education"),
    (_keywords("健康", "フィットネス", "運動", "医療", "病院", "診療", "fitness", "medical", "health", "workout"), "health"),
    (_keywords("家計", "銀行", "予算", "金融", "投資", "税金", "控除", "banking", "bank", "budget", "finance"), "finance"),
    (_keywords("ショッピング", "買い物", "商品", "通販", "販売", "shopping", "shop", "goods", "store"), "ecommerce"),
    (_keywords("コミュニティ", "チャット", "SNS", "交流", "掲示板", "community", "chat", "forum"), "social"),
    (_keywords("タスク", "TODO", "やること", "スケジュール", "task", "tasks", "todo", "to-do", "schedule"), "productivity"),
]

DEFAULT_CATEGORY = "creative"


def infer_category(text: str) -> str:
    """
    Category from the ordered keyword rules.

    Unmatched input is "creative"; productivity requires explicit task terms.
    """
    for predicate, category in CATEGORY_RULES:
        if predicate(text or ""):
            return category
    return DEFAULT_CATEGORY


@dataclass(frozen=True)
class CategoryProfile:
    label: str
    value: str
    users: Tuple[str, ...]
    features: Tuple[str, ...]
    business_logic: Tuple[str, ...]
    industry: str


CATEGORY_PROFILES = {
    "creative": CategoryProfile(
        "クリエイティブ", "表現と共有の楽しさ",
        ("クリエイター", "趣味で作品を作る人", "作品を見て楽しむ人"),
        ("作品投稿機能", "ギャラリー表示機能", "お気に入り保存機能", "コメント機能"),
        ("作品データの検証処理", "公開範囲の制御", "人気順ソート"),
        "個人の創作活動とその共有を支えるクリエイター向け市場",
    ),
    "entertainment": CategoryProfile(
        "エンターテインメント", "気軽に楽しめる体験",
        ("ライトユーザー", "ファンコミュニティ", "友人グループ"),
        ("コンテンツ一覧機能", "ランキング機能", "お気に入り機能", "シェア機能"),
        ("スコア集計処理", "ランキング算出", "おすすめ表示ロジック"),
        "余暇の時間を奪い合う娯楽コンテンツ市場",
    ),
    "education": CategoryProfile(
        "学習", "継続しやすい学び",
        ("学生", "社会人学習者", "講師"),
        ("学習コンテンツ管理機能", "進捗トラッキング機能", "クイズ機能", "成績記録機能"),
        ("学習進捗計算", "成績評価ロジック", "復習タイミングの算出"),
        "オンライン学習とリスキリング需要が伸びる教育市場",
    ),
    "health": CategoryProfile(
        "ヘルスケア", "無理なく続く健康管理",
        ("健康を意識する社会人", "運動習慣をつけたい人", "家族の健康を見守る人"),
        ("健康データ記録機能", "グラフ可視化機能", "リマインダー機能", "目標設定機能"),
        ("健康指標計算", "目標達成率の算出", "アラート判定処理"),
        "予防医療とセルフケアへの関心が高まるヘルスケア市場",
    ),
    "finance": CategoryProfile(
        "ファイナンス", "お金の流れの見える化",
        ("家計を管理する人", "個人事業主", "資産形成を始めた人"),
        ("収支記録機能", "予算管理機能", "カテゴリ別集計機能", "レポート出力機能"),
        ("金額計算処理", "予算超過判定", "月次集計ロジック"),
        "個人の資産管理をデジタル化するフィンテック市場",
    ),
    "ecommerce": CategoryProfile(
        "コマース", "欲しいものに素早く出会える購買体験",
        ("オンラインで買い物する人", "小規模ショップ運営者", "比較検討する購入者"),
        ("商品管理機能", "カート機能", "注文管理機能", "レビュー機能"),
        ("価格計算処理", "在庫更新ロジック", "注文ステータス管理"),
        "D2Cと小規模ECが拡大するオンライン小売市場",
    ),
    "social": CategoryProfile(
        "コミュニティ", "同じ関心を持つ人とのつながり",
        ("共通の趣味を持つ人", "地域コミュニティ", "情報交換したい人"),
        ("投稿機能", "コメント機能", "いいね機能", "フォロー機能"),
        ("フィード生成ロジック", "コンテンツモデレーション", "通知配信処理"),
        "関心ベースの小規模コミュニティが増えるソーシャル市場",
    ),
    "productivity": CategoryProfile(
        "生産性", "迷わず進められる日々の作業",
        ("忙しいビジネスパーソン", "チームリーダー", "フリーランサー"),
        ("タスク登録機能", "期限管理機能", "ステータス管理機能", "リマインダー機能"),
        ("期限切れ判定", "優先度ソート", "進捗率の算出"),
        "業務効率化ツールが乱立する生産性市場",
    ),
}

MAX_KEY_FEATURES = 6


class FallbackSynthesizer:
    """Builds an IdeaRecord from raw text without any model call."""

    def synthesize(self, text: str) -> IdeaRecord:
        """
        Derive a complete idea record from the user's own words.

        Args:
            text: The original user idea

        Returns:
            IdeaRecord; never None, even for empty input
        """
        text = text or ""
        category = infer_category(text)
        terms = extract_key_terms(text)
        profile = CATEGORY_PROFILES[category]
        subject = "・".join(terms[:2]) if terms else "日々のアイデア"

        logger.info(f"Synthesizing fallback idea: category={category}, terms={terms}")

        term_features = [f"{term}の登録・管理機能" for term in terms[:2]]
        insights = [f"{profile.label}分野に特化", "実用性重視の設計"]
        if terms:
            insights.append(f"主要キーワード: {', '.join(terms)}")

        return IdeaRecord(
            original=text,
            enhanced=f"{subject}に特化した{profile.label}アプリケーション",
            category=category,
            coreValue=f"{subject}における{profile.value}",
            realProblem=f"{subject}に関する情報が散らばり、継続して活用しにくいこと",
            targetUsers=list(profile.users),
            keyFeatures=(term_features + list(profile.features))[:MAX_KEY_FEATURES],
            businessLogic=list(profile.business_logic),
            uniqueValue=f"{profile.label}分野に絞り込んだ専門的アプローチ",
            industryContext=profile.industry,
            variations=[],
            insights=insights,
            businessPotential="medium",
        )

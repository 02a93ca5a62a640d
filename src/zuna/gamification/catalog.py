"""Badge catalog: every badge the app can award, keyed by stable id.

The catalog ships with the code. Changing a criterion or retiring a badge is a
deployment, not a migration; rows in ``user_badges`` whose id is no longer
listed here are simply hidden from reads.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from zuna.gamification.criteria import BooleanFlag, Criterion, SetCardinality, Threshold, Triggered


@dataclass(frozen=True)
class Badge:
    id: str
    name: str
    description: str
    icon: str
    category: str
    rarity: str
    criterion: Criterion
    is_secret: bool = False


CATEGORY_LABELS: dict[str, str] = {
    "first_steps": "İlk Adımlar",
    "creativity": "Yaratıcılık",
    "explorer": "Kaşif",
    "consistency": "Düzenlilik",
    "special": "Özel Günler",
    "secret": "Gizli Rozetler",
    "coloring_master": "Boyama Ustası",
    "color_explorer": "Renk Kaşifi",
    "brush_master": "Fırça Ustası",
    "smart_artist": "Akıllı Sanatçı",
    "coloring_streak": "Boyama Serisi",
    "dedication": "Özveri",
    "session": "Oturum Başarıları",
    "persistence": "Azim",
}

RARITIES = ("common", "rare", "epic", "legendary")

ALL_BRUSHES = frozenset({"standard", "watercolor", "marker", "spray", "crayon", "pencil", "highlighter"})
PREMIUM_BRUSHES = frozenset({"watercolor", "marker", "spray", "crayon", "highlighter"})

# Trigger kinds for Triggered criteria
TIME_OF_DAY = "time_of_day"
SPECIAL_DAY = "special_day"
COLORING_TIME_OF_DAY = "coloring_time_of_day"


BADGES: tuple[Badge, ...] = (
    # First steps
    Badge("first_analysis", "İlk Çizgi", "İlk analizini yap", "✏️", "first_steps", "common",
          Threshold("total_analyses", 1)),
    Badge("first_story", "Masal Başlangıcı", "İlk masalını oluştur", "📖", "first_steps", "common",
          Threshold("total_stories", 1)),
    Badge("first_coloring", "Renk Ustası Adayı", "İlk boyama sayfanı oluştur", "🎨", "first_steps", "common",
          Threshold("total_colorings", 1)),
    Badge("first_child", "Aile Kurucusu", "İlk çocuğunu ekle", "👶", "first_steps", "common",
          Threshold("children_count", 1)),
    Badge("profile_complete", "Profil Yıldızı", "Profilini tamamla", "⭐", "first_steps", "common",
          BooleanFlag("profile_complete")),

    # Creativity: analyses
    Badge("analysis_5", "Çizim Meraklısı", "5 analiz yap", "🔍", "creativity", "common",
          Threshold("total_analyses", 5)),
    Badge("analysis_10", "Çizim Avcısı", "10 analiz yap", "🎯", "creativity", "common",
          Threshold("total_analyses", 10)),
    Badge("analysis_25", "Çizim Uzmanı", "25 analiz yap", "🏅", "creativity", "rare",
          Threshold("total_analyses", 25)),
    Badge("analysis_50", "Çizim Ustası", "50 analiz yap", "🎖️", "creativity", "epic",
          Threshold("total_analyses", 50)),
    Badge("analysis_100", "Çizim Efsanesi", "100 analiz yap", "👑", "creativity", "legendary",
          Threshold("total_analyses", 100)),

    # Creativity: stories
    Badge("story_5", "Masal Anlatıcısı", "5 masal oluştur", "📚", "creativity", "common",
          Threshold("total_stories", 5)),
    Badge("story_10", "Masal Yazarı", "10 masal oluştur", "✍️", "creativity", "common",
          Threshold("total_stories", 10)),
    Badge("story_25", "Masal Ustası", "25 masal oluştur", "📜", "creativity", "rare",
          Threshold("total_stories", 25)),
    Badge("story_50", "Masal Büyücüsü", "50 masal oluştur", "🧙", "creativity", "epic",
          Threshold("total_stories", 50)),
    Badge("story_100", "Masal Efsanesi", "100 masal oluştur", "🌟", "creativity", "legendary",
          Threshold("total_stories", 100)),

    # Creativity: coloring pages
    Badge("coloring_5", "Renk Avcısı", "5 boyama sayfası oluştur", "🖍️", "creativity", "common",
          Threshold("total_colorings", 5)),
    Badge("coloring_10", "Renk Ustası", "10 boyama sayfası oluştur", "🎨", "creativity", "common",
          Threshold("total_colorings", 10)),
    Badge("coloring_25", "Renk Büyücüsü", "25 boyama sayfası oluştur", "🌈", "creativity", "rare",
          Threshold("total_colorings", 25)),
    Badge("coloring_50", "Renk Şampiyonu", "50 boyama sayfası oluştur", "🏆", "creativity", "epic",
          Threshold("total_colorings", 50)),
    Badge("coloring_100", "Renk Efsanesi", "100 boyama sayfası oluştur", "💎", "creativity", "legendary",
          Threshold("total_colorings", 100)),

    # Completed colorings
    Badge("first_masterpiece", "İlk Şaheser", "İlk boyamanı tamamla", "🖼️", "coloring_master", "common",
          Threshold("completed_colorings", 1)),
    Badge("gallery_starter", "Galeri Başlangıcı", "5 boyama tamamla", "🎭", "coloring_master", "common",
          Threshold("completed_colorings", 5)),
    Badge("art_collector", "Sanat Koleksiyoncusu", "10 boyama tamamla", "🏛️", "coloring_master", "rare",
          Threshold("completed_colorings", 10)),
    Badge("gallery_curator", "Galeri Küratörü", "25 boyama tamamla", "👨‍🎨", "coloring_master", "epic",
          Threshold("completed_colorings", 25)),
    Badge("museum_worthy", "Müze Değerinde", "50 boyama tamamla", "🏆", "coloring_master", "legendary",
          Threshold("completed_colorings", 50)),

    # Colors
    Badge("color_curious", "Renk Meraklısı", "10 farklı renk kullan", "🔴", "color_explorer", "common",
          Threshold("colors_used_total", 10)),
    Badge("rainbow_chaser", "Gökkuşağı Avcısı", "25 farklı renk kullan", "🌈", "color_explorer", "common",
          Threshold("colors_used_total", 25)),
    Badge("color_connoisseur", "Renk Uzmanı", "50 farklı renk kullan", "🎨", "color_explorer", "rare",
          Threshold("colors_used_total", 50)),
    Badge("palette_master", "Palet Ustası", "100 farklı renk kullan", "🎭", "color_explorer", "epic",
          Threshold("colors_used_total", 100)),
    Badge("chromatic_legend", "Kromatik Efsane", "200 farklı renk kullan", "💎", "color_explorer", "legendary",
          Threshold("colors_used_total", 200)),
    Badge("colorful_creation", "Renkli Yaratım", "Tek eserde 5+ renk kullan", "🖌️", "color_explorer", "common",
          Threshold("colors_used_single_max", 5)),
    Badge("rainbow_artwork", "Gökkuşağı Eseri", "Tek eserde 10+ renk kullan", "🌟", "color_explorer", "rare",
          Threshold("colors_used_single_max", 10)),
    Badge("chromatic_masterpiece", "Kromatik Şaheser", "Tek eserde 15+ renk kullan", "✨", "color_explorer", "epic",
          Threshold("colors_used_single_max", 15)),

    # Brushes
    Badge("brush_beginner", "Fırça Çırağı", "3 farklı fırça türü dene", "🖌️", "brush_master", "common",
          SetCardinality("brush_types", 3)),
    Badge("brush_explorer", "Fırça Kaşifi", "5 farklı fırça türü dene", "🎨", "brush_master", "rare",
          SetCardinality("brush_types", 5)),
    Badge("brush_virtuoso", "Fırça Virtüözü", "Tüm 7 fırça türünü dene", "🏆", "brush_master", "epic",
          SetCardinality("brush_types", len(ALL_BRUSHES))),
    Badge("premium_curious", "Premium Meraklısı", "İlk premium fırçayı kullan", "💫", "brush_master", "rare",
          SetCardinality("premium_brushes", 1)),
    Badge("premium_collector", "Premium Koleksiyoncu", "3 farklı premium fırça kullan", "💎", "brush_master", "epic",
          SetCardinality("premium_brushes", 3)),
    Badge("premium_master", "Premium Ustası", "Tüm premium fırçaları kullan", "👑", "brush_master", "legendary",
          SetCardinality("premium_brushes", len(PREMIUM_BRUSHES))),

    # Smart features
    Badge("ai_curious", "Yapay Zeka Meraklısı", "İlk AI renk önerisini kullan", "🤖", "smart_artist", "common",
          Threshold("ai_suggestions_used", 1)),
    Badge("ai_collaborator", "AI İşbirlikçisi", "10 kez AI öneri kullan", "🧠", "smart_artist", "rare",
          Threshold("ai_suggestions_used", 10)),
    Badge("ai_partner", "AI Ortağı", "25 kez AI öneri kullan", "🌟", "smart_artist", "epic",
          Threshold("ai_suggestions_used", 25)),
    Badge("harmony_seeker", "Uyum Arayıcısı", "İlk renk harmonisi kullan", "🎵", "smart_artist", "common",
          Threshold("harmony_colors_used", 1)),
    Badge("harmony_artist", "Uyum Sanatçısı", "10 kez renk harmonisi kullan", "🎶", "smart_artist", "rare",
          Threshold("harmony_colors_used", 10)),
    Badge("harmony_master", "Uyum Ustası", "25 kez renk harmonisi kullan", "🎼", "smart_artist", "epic",
          Threshold("harmony_colors_used", 25)),
    Badge("reference_starter", "Referans Başlangıcı", "İlk referans görsel kullan", "📷", "smart_artist", "common",
          Threshold("reference_images_used", 1)),
    Badge("reference_pro", "Referans Profesyoneli", "10 kez referans görsel kullan", "📸", "smart_artist", "rare",
          Threshold("reference_images_used", 10)),

    # Coloring streaks
    Badge("coloring_streak_3", "Boyama Çırağı", "3 gün üst üste boya", "🔥", "coloring_streak", "common",
          Threshold("coloring_streak", 3)),
    Badge("coloring_streak_7", "Haftalık Sanatçı", "7 gün üst üste boya", "⭐", "coloring_streak", "rare",
          Threshold("coloring_streak", 7)),
    Badge("coloring_streak_14", "İki Haftalık Usta", "14 gün üst üste boya", "💪", "coloring_streak", "epic",
          Threshold("coloring_streak", 14)),
    Badge("coloring_streak_30", "Aylık Efsane", "30 gün üst üste boya", "👑", "coloring_streak", "legendary",
          Threshold("coloring_streak", 30)),

    # Time spent (minutes)
    Badge("time_spent_30", "Sanat Zamanı", "Toplam 30 dakika boyama yap", "⏱️", "dedication", "common",
          Threshold("coloring_time_total", 30)),
    Badge("time_spent_60", "Sanat Saati", "Toplam 1 saat boyama yap", "🕐", "dedication", "common",
          Threshold("coloring_time_total", 60)),
    Badge("time_spent_300", "Sanat Günü", "Toplam 5 saat boyama yap", "🌅", "dedication", "rare",
          Threshold("coloring_time_total", 300)),
    Badge("time_spent_600", "Sanat Haftası", "Toplam 10 saat boyama yap", "🌙", "dedication", "epic",
          Threshold("coloring_time_total", 600)),
    Badge("time_spent_1800", "Sanat Yaşamı", "Toplam 30 saat boyama yap", "🌟", "dedication", "legendary",
          Threshold("coloring_time_total", 1800)),

    # Sessions
    Badge("speed_artist", "Hızlı Sanatçı", "5 dakikadan kısa sürede tamamla", "⚡", "session", "rare",
          Threshold("quick_colorings", 1)),
    Badge("marathon_artist", "Maraton Sanatçısı", "30 dakikadan uzun tek oturum", "🏃", "session", "rare",
          Threshold("marathon_colorings", 1)),

    # Persistence
    Badge("never_give_up", "Asla Pes Etme", "Geri al'ı kullan ve devam et", "💪", "persistence", "common",
          Threshold("undo_and_continue", 1)),
    Badge("persistent_artist", "Azimli Sanatçı", "10 kez geri al'ı kullan ve devam et", "🔄", "persistence",
          "rare", Threshold("undo_and_continue", 10)),

    # Secret coloring times
    Badge("secret_midnight_artist", "Gece Yarısı Sanatçısı", "Gece yarısından sonra boya", "🌙", "secret", "rare",
          Triggered(COLORING_TIME_OF_DAY, "midnight"), is_secret=True),
    Badge("secret_sunrise_creator", "Şafak Yaratıcısı", "Gün doğumunda boya", "🌅", "secret", "rare",
          Triggered(COLORING_TIME_OF_DAY, "sunrise"), is_secret=True),
    Badge("secret_golden_hour", "Altın Saat", "Gün batımında boya", "🌇", "secret", "epic",
          Triggered(COLORING_TIME_OF_DAY, "golden_hour"), is_secret=True),

    # Explorer
    Badge("explorer_3_tests", "Test Kaşifi", "3 farklı test türü dene", "🔍", "explorer", "common",
          SetCardinality("unique_test_types", 3)),
    Badge("explorer_5_tests", "Test Gezgini", "5 farklı test türü dene", "🧭", "explorer", "rare",
          SetCardinality("unique_test_types", 5)),
    Badge("explorer_all_tests", "Test Ustası", "Tüm 9 test türünü dene", "🏆", "explorer", "legendary",
          SetCardinality("unique_test_types", 9)),
    Badge("multiple_children", "Kalabalık Aile", "Birden fazla çocuk ekle", "👨‍👩‍👧‍👦", "explorer", "rare",
          Threshold("children_count", 2)),

    # Consistency
    Badge("streak_3", "Düzenli Ziyaretçi", "3 gün üst üste kullan", "🔥", "consistency", "common",
          Threshold("consecutive_days", 3)),
    Badge("streak_7", "Haftalık Yıldız", "7 gün üst üste kullan", "⭐", "consistency", "rare",
          Threshold("consecutive_days", 7)),
    Badge("streak_14", "Süper Kullanıcı", "14 gün üst üste kullan", "💪", "consistency", "epic",
          Threshold("consecutive_days", 14)),
    Badge("streak_30", "Efsane", "30 gün üst üste kullan", "👑", "consistency", "legendary",
          Threshold("consecutive_days", 30)),

    # Special days
    Badge("special_23_nisan", "Çocuk Bayramı", "23 Nisan'da uygulamayı kullan", "🎈", "special", "rare",
          Triggered(SPECIAL_DAY, "04-23")),
    Badge("special_29_ekim", "Cumhuriyet Çocuğu", "29 Ekim'de uygulamayı kullan", "🇹🇷", "special", "rare",
          Triggered(SPECIAL_DAY, "10-29")),
    Badge("special_new_year", "Yeni Yıl Büyücüsü", "1 Ocak'ta uygulamayı kullan", "🎉", "special", "rare",
          Triggered(SPECIAL_DAY, "01-01")),
    Badge("special_19_mayis", "Gençlik Ruhu", "19 Mayıs'ta uygulamayı kullan", "🏃", "special", "rare",
          Triggered(SPECIAL_DAY, "05-19")),

    # Secret
    Badge("secret_night_owl", "Gece Kuşu", "Gece yarısından sonra kullan", "🦉", "secret", "rare",
          Triggered(TIME_OF_DAY, "night"), is_secret=True),
    Badge("secret_early_bird", "Erken Kalkan", "Sabah 6'dan önce kullan", "🌅", "secret", "rare",
          Triggered(TIME_OF_DAY, "early_morning"), is_secret=True),
    Badge("secret_weekend_warrior", "Hafta Sonu Savaşçısı", "Hem Cumartesi hem Pazar kullan", "🎮", "secret",
          "epic", Triggered(SPECIAL_DAY, "weekend_both"), is_secret=True),
)

BADGES_BY_ID: MappingProxyType[str, Badge] = MappingProxyType({b.id: b for b in BADGES})


def get_badge(badge_id: str) -> Badge | None:
    return BADGES_BY_ID.get(badge_id)


def visible_badges() -> list[Badge]:
    """Catalog minus secret badges, in catalog order."""
    return [b for b in BADGES if not b.is_secret]


def badges_for_trigger(trigger: str) -> dict[str, str]:
    """Map trigger value -> badge id for one trigger kind, e.g. ``{"04-23": "special_23_nisan"}``."""
    return {
        b.criterion.value: b.id
        for b in BADGES
        if isinstance(b.criterion, Triggered) and b.criterion.trigger == trigger
    }


def badges_for_stat(stat: str) -> list[Badge]:
    """Stat-backed badges reading ``stat``, lowest target first."""
    return [
        b for b in BADGES
        if not isinstance(b.criterion, Triggered) and b.criterion.stat == stat
    ]

from __future__ import annotations

SOURCE_CATEGORY = "AI"  # news_articles 행의 상위 분류 (피드 단위 고정값)

SOURCE_TYPES = (  # 소스 분류 태그 (classifier 결과 집합)
    "youtube_channel",
    "youtube_playlist",
    "community_reddit",
    "research_platform",
    "research_platform_api",
    "newsletter",
    "podcast",
    "company_blog",
    "rss_website",
)

RESEARCH_SOURCE_TYPES = {"research_platform", "research_platform_api"}
SHORT_FORM_SOURCE_TYPES = {"podcast", "youtube_channel", "youtube_playlist"}  # 본문이 짧은 소스

IMPORTANT_KEYWORDS = [  # 중요도 점수 가산 키워드 (고유 매칭 1개당 +1, 최대 +5)
    # Major companies
    "openai", "google", "microsoft", "meta", "anthropic", "deepmind", "nvidia",
    # Major products
    "gpt", "chatgpt", "gemini", "claude", "copilot", "bard",
    # Important events
    "breakthrough", "launch", "release", "announces", "unveils", "acquisition",
    # Research terms
    "research", "model", "algorithm", "neural network", "machine learning",
    "artificial intelligence",
    # Impact terms
    "regulation", "policy", "lawsuit", "controversy", "ethics", "safety",
    # Business terms
    "funding", "investment", "billion", "million", "ipo", "partnership",
]

PRESTIGIOUS_SOURCES = {  # 소스명 정확 일치 시 +2
    "MIT Technology Review",
    "TechCrunch AI",
    "Reuters Technology",
    "VentureBeat AI",
}

BASE_IMPORTANCE_SCORE = 5
MAX_KEYWORD_BONUS = 5
PRESTIGE_BONUS = 2
FEATURED_MIN_SCORE = 9  # is_featured 기준
MIN_IMPORTANCE_DEFAULT = 6
MIN_IMPORTANCE_RESEARCH = 5  # 연구/니치 소스는 게시 하한을 낮춘다

MIN_WORD_COUNT = 40
MIN_WORD_COUNT_SHORT_FORM = 10  # 팟캐스트/영상 설명문 기준

REQUIRED_AI_SIGNALS = [  # 최소 하나는 포함되어야 하는 AI 신호어 (부분 문자열 매칭)
    "ai",
    "artificial intelligence",
    "machine learning",
    "deep learning",
    "neural",
    "llm",
    "large language model",
    "generative",
    "transformer",
    "computer vision",
    "reinforcement learning",
    "diffusion",
    "robotics",
]

BANNED_PATTERNS = [r"sponsored", r"giveaway", r"advertorial"]  # 광고/홍보성 표식 (대소문자 무시)

BANNED_TOPICS = [  # 단어 경계 매칭으로 제외하는 주제
    "war",
    "armed conflict",
    "gaza",
    "israel",
    "palestine",
    "ukraine",
    "russia",
    "iran",
    "north korea",
    "terror",
    "weapon",
    "missile",
]

STOPWORDS = {  # 로컬 요약기/이미지 검색 키워드 추출용 불용어
    "the", "and", "for", "are", "with", "that", "this", "from", "have", "has", "will",
    "about", "into", "their", "they", "them", "its", "been", "was", "were", "while",
    "where", "when", "your", "our", "you", "but", "can", "just", "than", "also",
    "any", "each", "other", "more", "over", "after", "before", "under", "between",
    "which", "would", "should", "could", "how", "who", "what", "why", "because",
    "during", "including", "across", "among", "once", "both", "being", "per", "such",
    "very", "via", "every", "still", "many", "much", "new", "latest",
}

SUMMARY_CHAR_LIMIT = 800
TITLE_MAX_CHARS = 200

GENERIC_FALLBACK_PREFIXES = (  # 비특정 플레이스홀더 이미지 (merge 보호 대상 아님)
    "https://source.unsplash.com/featured/",
    "http://source.unsplash.com/featured/",
)

FALLBACK_NEWS_IMAGES = [  # 카테고리를 알 수 없을 때 해시로 선택
    "https://source.unsplash.com/featured/?technology",
    "https://source.unsplash.com/featured/?ai",
    "https://source.unsplash.com/featured/?news",
    "https://source.unsplash.com/featured/?innovation",
]

CATEGORY_FALLBACK_IMAGES = {  # 카테고리별 큐레이션 정적 이미지
    "Technology": "https://images.unsplash.com/photo-1518779578993-ec3579fee39f?w=1200&q=80&auto=format&fit=crop",
    "Research": "https://images.unsplash.com/photo-1559757175-5700dde67538?w=1200&q=80&auto=format&fit=crop",
    "Business": "https://images.unsplash.com/photo-1454165205744-3b78555e5572?w=1200&q=80&auto=format&fit=crop",
    "Robotics": "https://images.unsplash.com/photo-1581092580497-e0d23cbdf1dc?w=1200&q=80&auto=format&fit=crop",
    "Tools": "https://images.unsplash.com/photo-1555066931-4365d14bab8c?w=1200&q=80&auto=format&fit=crop",
    "AI Tools": "https://images.unsplash.com/photo-1555066931-4365d14bab8c?w=1200&q=80&auto=format&fit=crop",
}

DEFAULT_CATEGORY_FALLBACK_IMAGE = (
    "https://images.unsplash.com/photo-1558494949-ef527443d01d?w=1200&q=80&auto=format&fit=crop"
)

IMAGE_FALLBACK_POLICIES = {"fallback", "skip"}

GENERIC_PHOTO_TAGS = {  # 스톡 사진 관련도 감점 태그
    "abstract", "background", "wallpaper", "texture", "pattern", "gradient", "design",
    "creative", "illustration", "art", "sunset", "landscape", "nature", "flower", "sky",
    "beach", "forest",
}

AI_FOCUS_KEYWORDS = [  # 스톡 사진 검색어 보강용
    "ai",
    "artificial intelligence",
    "machine learning",
    "technology",
    "robotics",
    "automation",
    "data center",
    "semiconductor",
    "chip",
    "research",
    "enterprise",
    "software",
]

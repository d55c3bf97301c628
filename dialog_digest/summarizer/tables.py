"""Keyword tables driving the heuristic summarizer.

Kept as plain data so the rules can be tuned (or tested) without touching
the extraction code.
"""

# Clause keywords that mark a user message fragment as a discussion topic.
TOPIC_KEYWORDS: tuple[str, ...] = (
    "实现", "如何", "怎么", "为什么", "优化", "修复", "创建", "添加", "修改", "设计",
    "implement", "how", "why", "optimize", "fix", "create", "add", "modify", "design",
)

# A domain is reported when at least DOMAIN_MIN_MATCHES distinct keywords appear.
DOMAIN_MIN_MATCHES = 2

DOMAIN_KEYWORDS: dict[str, tuple[str, ...]] = {
    "前端开发": (
        "react", "vue", "angular", "css", "html", "jsx", "dom", "组件", "前端", "页面",
    ),
    "后端开发": (
        "api", "server", "express", "django", "flask", "fastapi", "接口", "后端", "服务端",
        "路由",
    ),
    "数据库": (
        "sql", "mysql", "postgres", "mongodb", "redis", "sqlite", "数据库", "索引", "查询",
    ),
    "运维部署": (
        "docker", "kubernetes", "nginx", "deploy", "ci", "部署", "容器", "流水线",
    ),
    "人工智能": (
        "ai", "llm", "gpt", "claude", "模型", "训练", "机器学习", "prompt", "embedding",
    ),
    "性能优化": (
        "性能", "缓存", "cache", "memo", "lazy", "performance", "优化", "渲染",
    ),
    "测试": (
        "test", "pytest", "jest", "mock", "测试", "单元测试", "断言", "coverage",
    ),
    "安全": (
        "security", "auth", "token", "xss", "csrf", "加密", "安全", "权限", "认证",
    ),
    "类型系统": (
        "typescript", "泛型", "generic", "interface", "类型", "type hint",
    ),
}

# Question categories, checked in order against each user message.
QUESTION_CATEGORIES: dict[str, tuple[str, ...]] = {
    "方法类问题": ("如何", "怎么", "怎样", "how to", "how do", "how can"),
    "原理类问题": ("为什么", "原理", "为何", "why"),
    "问题排查": ("报错", "错误", "异常", "失败", "bug", "error", "exception", "不工作"),
    "优化类问题": ("优化", "提升", "改进", "加速", "optimize", "improve", "faster"),
    "功能需求": ("实现", "添加", "创建", "新增", "支持", "implement", "add", "create"),
}

# Tokens ignored when computing recurring themes.
STOP_WORDS: frozenset[str] = frozenset({
    # Chinese function words and fillers
    "这个", "那个", "一个", "我们", "你们", "他们", "可以", "就是", "如果", "因为",
    "所以", "但是", "然后", "还是", "或者", "什么", "怎么", "如何", "为什么", "没有",
    "已经", "需要", "使用", "进行", "通过", "以及", "这样", "那么", "现在", "时候",
    "这里", "一下", "一些", "所有", "其他", "问题", "方法", "方式", "例如", "比如",
    "的是", "是一", "不是", "也是", "以下", "下面", "上面", "可能", "应该", "能够",
    # English
    "the", "and", "for", "you", "are", "with", "this", "that", "from", "can", "use",
    "your", "not", "but", "have", "will", "what", "how", "why", "when", "which",
    "return", "const", "function", "def", "import", "let", "var", "new",
})

THEME_TOP_N = 5
THEME_MIN_COUNT = 2

# Length heuristics
DEEP_DISCUSSION_MEAN_LENGTH = 500
ACTIVE_LEARNER_RATIO = 0.8

# Extraction limits
MAX_TOPICS = 10
MAX_TOPIC_LENGTH = 100
MIN_TOPIC_LENGTH = 5
MAX_KNOWLEDGE_POINTS = 8
MIN_CODE_LENGTH = 20
MAX_CODE_CONTENT = 500
MAX_CONTEXT_LINES = 3
MIN_LIST_ITEMS = 3
MAX_LIST_ITEMS = 10
MAX_HEADING_TITLE = 50
MAX_SECTION_CONTENT = 300

FALLBACK_INSIGHT = "今天的对话涵盖了多个技术话题，建议回顾上述知识点并在实践中加以巩固。"

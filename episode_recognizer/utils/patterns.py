"""
正则模式目录

剧集识别流水线使用的全部预编译正则，按类别分组：
日期、长/短季标记（多语言）、集标记、多集标记、动漫前置/后置模式、
中文模式、数字兜底，以及停用词、分卷标记、光盘结构文件等结构性辅助模式。

每个模式既用于匹配也用于剥离（sub），运行时不再拼接模式文本，
唯一例外是依赖剧集名的动态模式（见 filename_parser.strip_show_name）。
"""

import re

# ============================================================================
# 日期
# ============================================================================

# foo.yyyy.mm.dd.*
DATE_1 = re.compile(r'([0-9]{4})[.-]([0-9]{2})[.-]([0-9]{2})', re.IGNORECASE)
# foo.dd.mm.yyyy.*
DATE_2 = re.compile(r'([0-9]{2})[.-]([0-9]{2})[.-]([0-9]{4})', re.IGNORECASE)


# ============================================================================
# 季 / 集标记
# ============================================================================

# "季" 的多语言写法（小写），附加 "series"
SEASON_TRANSLATIONS = (
    "series", "season", "الموسم", "sezóna", "sæson", "staffel", "σεζόν", "temporada", "فصل",
    "kausi", "saison", "sezona", "évad", "þáttaröð", "stagione", "시즌", "seizoen", "sesong",
    "sezon", "сезон", "сезона", "säsong", "சீசன்",
)

SEASON_LONG = re.compile(
    r'(' + '|'.join(re.escape(word) for word in SEASON_TRANSLATIONS) + r')[\s_.-]?(\d{1,4})',
    re.IGNORECASE
)

# 必须以分隔符开头，避免匹配单词内部
SEASON_ONLY = re.compile(r'[\s_.-]s[\s_.-]?(\d{1,4})', re.IGNORECASE)
EPISODE_ONLY = re.compile(r'[\s_.-]ep?[\s_.-]?(\d{1,4})', re.IGNORECASE)
EPISODE_PATTERN = re.compile(r'[epx_-]+(\d{1,4})', re.IGNORECASE)
EPISODE_PATTERN_2 = re.compile(r'(?:episode|ep)[\. _-]*(\d{1,4})', re.IGNORECASE)
# (1/6)，支持普通斜杠与 U+29F8 大斜杠
EPISODE_PATTERN_NR = re.compile(r'(\d{1,2})[⧸/](\d{1,2})', re.IGNORECASE)

# Part / Pt + 罗马数字
ROMAN_PATTERN = re.compile(r'(part|pt)[\._\s]+([MDCLXVI]+)', re.IGNORECASE)

# S01E02E03 / S01.E02-E03
SEASON_MULTI_EP = re.compile(r's(\d{1,4})[ _]?((?:([epx.-]+\d{1,4})+))', re.IGNORECASE)
# 1x02x03
SEASON_MULTI_EP_2 = re.compile(r'(\d{1,4})(?=x)((?:([epx]+\d{1,4})+))', re.IGNORECASE)

NUMBERS_2 = re.compile(r'([0-9]{2})', re.IGNORECASE)
NUMBERS_3 = re.compile(r'([0-9])([0-9]{2})', re.IGNORECASE)


# ============================================================================
# 动漫命名 (参考 https://kodi.wiki/view/Anime)
# ============================================================================

# 集号片段：可选分隔符、可选 e/ep 前缀、1-4 位数字、可选 v2 版本号
_ANIME_EP = r'(?:[ _.-]*(?:ep?[ .]?)?(\d{1,4})(?:[_ ]?v\d+)?)+'
# 集号之后允许出现的非括号文字与若干括号标签
_ANIME_TAIL = r'(?=\b|_)[^\])}]*?(?:[\[({][^\])}]+[\])}][ _.-]*)*?'
# 前置模式以 8 位十六进制校验码标签收尾
_ANIME_HASH = r'(?:[\[({][\da-f]{8}[\])}])'
# 后置模式锚定到结尾，不能再包含括号或路径分隔符
_ANIME_END = r'[^\]\[)(}{\\/]*$'

# 文件名中带 Special/OVA 等标记 → 第 0 季，不管目录怎么写
ANIME_PREPEND1 = re.compile(
    r'(Special|SP|OVA|OAV|Picture Drama)' + _ANIME_EP + _ANIME_TAIL + _ANIME_HASH,
    re.IGNORECASE
)
# 位于标明季数的目录内，可有任意层子目录
ANIME_PREPEND2 = re.compile(
    r'(?:S(?:eason)?\s*(?=\d))?(Specials|\d{1,3})[\\/](?:[^\\/]+[\\/])*[^\\/]+(?:\b|_)'
    + _ANIME_EP + _ANIME_TAIL + _ANIME_HASH,
    re.IGNORECASE
)
# 文件名内联季标记
ANIME_PREPEND3 = re.compile(
    r'[-._ ]+S(?:eason ?)?(\d{1,3})' + _ANIME_EP + _ANIME_TAIL + _ANIME_HASH,
    re.IGNORECASE
)
# 其余情况：空的第一捕获组，默认第 1 季
ANIME_PREPEND4 = re.compile(
    r'((?=\b|_))(?:[ _.-]*(?:ep?[ .]?)?(\d{1,4})(?:-(\d{1,3}))?(?:[_ ]?v\d+)?)+'
    + _ANIME_TAIL + _ANIME_HASH,
    re.IGNORECASE
)
# 多集连写 12-13-14，主模式只能保留首尾，这里手动拆分
ANIME_PREPEND4_2 = re.compile(r'((\d{1,3})(?:-(\d{1,3})){1,10})')

ANIME_APPEND1 = re.compile(
    r'(Special|SP|OVA|OAV|Picture Drama)' + _ANIME_EP + _ANIME_TAIL + _ANIME_END,
    re.IGNORECASE
)
ANIME_APPEND2 = re.compile(
    r'(?:S(?:eason)?\s*(?=\d))?(Specials|\d{1,3})[\\/](?:[^\\/]+[\\/])*[^\\/]+(?:\b|_)'
    r'[ _.-]*(?:ep?[ .]?)?(\d{1,4})(?:[_ ]?v\d+)?(?:\b|_)'
    r'[^\])}]*?(?:[\[({][^\])}]+[\])}][ _.-]*)*?[^\]\[)(}{\\/]*?$',
    re.IGNORECASE
)
ANIME_APPEND3 = re.compile(
    r'[-._ ]+S(?:eason ?)?(\d{1,3})' + _ANIME_EP + _ANIME_TAIL + _ANIME_END,
    re.IGNORECASE
)
ANIME_APPEND4 = re.compile(
    r'((?=\b|_))' + _ANIME_EP + _ANIME_TAIL + _ANIME_END,
    re.IGNORECASE
)


# ============================================================================
# 中文剧集格式
# ============================================================================

_CN_NUM = r'([一二三四五六七八九十]|\d{1,2})'

CHINESE_SEASON_EPISODE_PATTERN = re.compile(r'第' + _CN_NUM + r'季第(\d{1,4})集')
CHINESE_EPISODE_PATTERN = re.compile(r'第(\d{1,4})集')
CHINESE_EPISODE_EXTENDED = re.compile(r'(\d{1,4})集')
CHINESE_PART_PATTERN = re.compile(r'第' + _CN_NUM + r'部分?')
CHINESE_CHAPTER_PATTERN = re.compile(r'第' + _CN_NUM + r'章')
CHINESE_SEASON_PATTERN = re.compile(r'第' + _CN_NUM + r'季')
# 标题中独立的大写罗马数字，如 "大海战II"
ROMAN_NUMERAL_TITLE = re.compile(r'(?<![A-Za-z])([IVX]{1,5})(?![A-Za-z])')


# ============================================================================
# 结构性辅助模式
# ============================================================================

FOLDER_RE = re.compile(r'(.*[\\/])')
EXTENSION_RE = re.compile(r'\.\w{1,4}$')
BRACKET_YEAR_RE = re.compile(r'[\(\[]\d{4}[\)\]]')
BRACKET_CRC_RE = re.compile(r'[\(\[][A-Fa-f0-9]{8}[\)\]]')
OPTIONALS_RE = re.compile(r'[\[\{](.*?)[\]\}]')
NUMBER_SPLIT_RE = re.compile(r'[\s|_.-]')
DIGITS_ONLY_RE = re.compile(r'[0-9]+')
LEADING_SEPARATORS_RE = re.compile(r'^[ .\-_]+')
TRAILING_SEPARATORS_RE = re.compile(r'[ .\-_]+$')
ILLEGAL_TITLE_CHARS_RE = re.compile(r'[":<>|?*]')
IMDB_ID_RE = re.compile(r'tt\d{7,8}')
TITLE_SPLIT_RE = re.compile(r'[\[\]\\() _,.-]+')

# 光盘结构文件：DVD / 蓝光目录中的文件名不携带剧集信息
DISC_SET_FILE_RE = re.compile(
    r'(?:(video_ts|vts_\d\d_\d)\.(vob|bup|ifo)|(index\.bdmv|movieobject\.bdmv|\d{5}\.m2ts))$',
    re.IGNORECASE
)
DISC_FILE_RE = re.compile(
    r'^(?:(video_ts|vts_\d\d_\d)\.(vob|bup|ifo)|(index|movieobject)\.bdmv|\d{5}\.m2ts'
    r'|hv\d{3}a?\.evo|video_ts|bdmv|hvdvd_ts)$',
    re.IGNORECASE
)

# 分卷标记 (cd1 / part2 / disc1 / dvd1，及字母版 cda)
STACKING_MARKER_RES = (
    re.compile(r'(.*?)[ _.-]*((?:cd|dvd|p(?:ar)?t|dis[ck])[ _.-]*[0-9]+)(\.[^.]+)$', re.IGNORECASE),
    re.compile(r'(.*?)[ _.-]*((?:cd|dvd|p(?:ar)?t|dis[ck])[ _.-]*[a-d])(\.[^.]+)$', re.IGNORECASE),
    re.compile(r'(.*?)[ _.-]*(\[(?:cd|dvd|p(?:ar)?t|dis[ck])[ _.-]*[0-9]+\])(\.[^.]+)$', re.IGNORECASE),
)
FOLDER_STACKING_MARKER_RE = re.compile(
    r'(.*?)[ _.-]*((?:cd|dvd|p(?:ar)?t|dis[ck])[ _.-]*[0-9]+)$', re.IGNORECASE
)

# 停用词：片源 / 编码 / 画质等发布标签，作为完整词出现时移除
STOPWORDS = (
    "dts-hd", "ac3", "aac", "dts", "truehd", "atmos", "flac", "dd5", "ddp5",
    "custom", "divx", "divx5", "xvid", "x264", "x265", "h264", "h265", "hevc", "avc", "10bit",
    "dsr", "dsrip", "dvdrip", "dvdscr", "dvdscreener", "screener", "cam", "telesync", "telecine",
    "hdtv", "hdtvrip", "hdrip", "pdtv", "bdrip", "brrip", "bluray", "blu-ray", "remux", "hddvd",
    "web-dl", "webdl", "webrip", "web-rip", "uhd", "hdr", "hdr10", "dolby",
    "480p", "480i", "576p", "576i", "720p", "720i", "1080p", "1080i", "2160p", "4k",
    "internal", "limited", "proper", "repack", "rerip", "retail", "unrated", "extended",
    "multisubs", "ntsc", "nfofix", "read.nfo",
)
STOPWORD_RES = tuple(
    re.compile(r'(?<![a-zA-Z0-9])' + re.escape(word) + r'(?![a-zA-Z0-9])', re.IGNORECASE)
    for word in STOPWORDS
)
RESOLUTION_RE = re.compile(r'(?<![a-zA-Z0-9])\d{3,4}x\d{3,4}(?![a-zA-Z0-9])', re.IGNORECASE)
FPS_RE = re.compile(r'(?<![a-zA-Z0-9])\d{2,3}(\.\d{2,3})?fps(?![a-zA-Z0-9])', re.IGNORECASE)


# ============================================================================
# 标题清理 (cleanEpisodeTitle 使用的剧集变体)
# ============================================================================

TITLE_EPISODE_VARIANT_RES = (
    re.compile(r'[Ss]([0-9]+)[\]\[ _.-]*[Ee]([0-9]+)'),
    re.compile(r'[ _.-]()[Ee][Pp]?_?([0-9]+)'),
    DATE_1,
    DATE_2,
    re.compile(r'[\\/._ \[(-]([0-9]+)x([0-9]+)'),
    re.compile(r'[\\/ _.-]p(?:ar)?t[ _.-]()([ivx]+)'),
    re.compile(r'[epx_-]+(\d{1,3})'),
    re.compile(r'episode[\. _-]*(\d{1,3})'),
    re.compile(r'(part|pt)[\._\s]+([MDCLXVI]+)'),
    re.compile(SEASON_LONG.pattern),
    re.compile(r's(\d{1,4})[ ]?((?:([epx_.-]+\d{1,3})+))'),
    re.compile(r'(\d{1,4})(?=x)((?:([epx]+\d{1,3})+))'),
)

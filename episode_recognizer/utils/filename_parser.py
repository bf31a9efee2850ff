"""
剧集文件名识别模块

根据媒体文件的相对路径与可选的剧集名，识别其对应的季数与集数。
识别由一组有序的正则策略级联完成：多语言季标记、多集标记、动漫命名、
罗马数字、日期以及通用数字兜底，另外提供中文格式解析与集标题清理。

所有阶段函数都是 (MatchResult, 文本) -> MatchResult 形式的纯函数，
只填写自己负责的字段；解析失败一律以哨兵值表示，不抛异常。
"""

import datetime
import logging
import re
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from episode_recognizer.core.cache import ResultCache, generate_cache_key
from episode_recognizer.utils import patterns
from episode_recognizer.utils.numerals import chinese_to_int, decode_roman

logger = logging.getLogger(__name__)

FILENAME_CACHE_PREFIX = "filename"

# 中文格式中 "X集" 的合理上限
MAX_CHINESE_EPISODE = 999
# 标题中罗马数字的合理上限 (I ~ XX)
MAX_TITLE_ROMAN = 20


# ============================================================================
# 数据结构
# ============================================================================

@dataclass
class MatchResult:
    """剧集识别结果，season 为 -1 表示未确定，0 为特别篇"""
    season: int = -1
    episodes: List[int] = field(default_factory=list)
    date: Optional[datetime.date] = None
    name: str = ""
    cleaned_name: str = ""
    stacking_marker_found: bool = False

    def add_episode(self, episode: int) -> bool:
        """追加集号，负数与重复集号被忽略"""
        if episode < 0 or episode in self.episodes:
            return False
        self.episodes.append(episode)
        return True

    @property
    def has_season(self) -> bool:
        return self.season != -1

    @property
    def is_complete(self) -> bool:
        """同时具有季数和至少一个集号"""
        return self.season != -1 and bool(self.episodes)

    @property
    def is_empty(self) -> bool:
        return self.season == -1 and not self.episodes and self.date is None

    def copy(self) -> "MatchResult":
        return replace(self, episodes=list(self.episodes))


# ============================================================================
# 辅助函数
# ============================================================================

def _safe_int(value: Optional[str]) -> Optional[int]:
    """数字转换失败时返回 None，视为该阶段未匹配"""
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def get_file_name(path: str) -> str:
    """返回路径的最后一段（同时兼容 / 和 \\ 分隔符）"""
    return re.split(r'[\\/]', path)[-1]


def get_folder_path(path: str) -> str:
    """返回路径中最后一个分隔符之前（含分隔符）的部分"""
    m = patterns.FOLDER_RE.match(path)
    return m.group(1) if m else ""


def remove_stopwords(name: str) -> str:
    """移除分辨率、帧率与发布标签等停用词，保留两侧分隔符"""
    name = patterns.RESOLUTION_RE.sub(' ', name, count=1)
    name = patterns.FPS_RE.sub(' ', name, count=1)
    for stopword_re in patterns.STOPWORD_RES:
        name = stopword_re.sub('', name)
    return name


def get_stacking_marker(filename: str) -> str:
    """返回文件名中的分卷标记（如 cd1 / part2），没有则返回空字符串"""
    for marker_re in patterns.STACKING_MARKER_RES:
        m = marker_re.match(filename)
        if m:
            return m.group(2)
    return ""


def clean_folder_stacking_markers(name: str) -> str:
    """移除结尾处的分卷标记（无扩展名形式）"""
    m = patterns.FOLDER_STACKING_MARKER_RE.match(name)
    return m.group(1) if m else name


def is_disc_file(filename: str) -> bool:
    """是否为 DVD / 蓝光 / HD-DVD 光盘结构文件"""
    return patterns.DISC_FILE_RE.match(filename) is not None


def _build_date(year: str, month: str, day: str) -> Optional[datetime.date]:
    try:
        return datetime.date(int(year), int(month), int(day))
    except ValueError:
        return None


def _delimited_show_name(showname: str) -> str:
    """将剧集名中的分隔符替换为分隔符类，"some fine show" 可匹配 "some.fine-show" """
    return '[ _.-]'.join(re.escape(part) for part in re.split(r'[ _.-]', showname))


def strip_show_name(basename: str, foldername: str, showname: str) -> Tuple[str, str]:
    """
    从文件名与目录名中移除剧集名

    先移除字面剧集名（前一个字符不能是 S/E，避免吃掉季集字母），
    再移除分隔符宽松的变体。动态正则构建失败时跳过该步骤。
    """
    literal_re = re.compile(r'[^ES]' + re.escape(showname), re.IGNORECASE)
    basename = literal_re.sub('', basename)
    foldername = literal_re.sub('', foldername)
    try:
        delimited_re = re.compile(_delimited_show_name(showname), re.IGNORECASE)
    except re.error as e:
        logger.debug(f"剧集名 '{showname}' 无法构建分隔符模式，跳过: {e}")
        return basename, foldername
    return delimited_re.sub('', basename), delimited_re.sub('', foldername)


# ============================================================================
# 识别阶段
# ============================================================================

def parse_season_long(result: MatchResult, name: str) -> MatchResult:
    """多语言长季标记 (Season 1 / Staffel 2 / сезон 3 ...)"""
    if result.season == -1:
        m = patterns.SEASON_LONG.search(name)
        if m:
            season = _safe_int(m.group(2))
            if season is not None:
                result.season = season
                logger.debug(f"识别到季数 '{season}' (长季标记)")
    return result


def parse_season_only(result: MatchResult, name: str) -> MatchResult:
    """短季标记 (分隔符 + S + 数字)"""
    if result.season == -1:
        m = patterns.SEASON_ONLY.search(name)
        if m:
            season = _safe_int(m.group(1))
            if season is not None:
                result.season = season
                logger.debug(f"识别到季数 '{season}' (短季标记)")
    return result


def parse_episode_only(result: MatchResult, name: str) -> MatchResult:
    """短集标记 (分隔符 + E/EP + 数字)"""
    m = patterns.EPISODE_ONLY.search(name)
    if m:
        episode = _safe_int(m.group(1))
        if episode is not None and result.add_episode(episode):
            logger.debug(f"识别到集数 '{episode}' (短集标记)")
    return result


def parse_season_multi_ep(result: MatchResult, name: str) -> MatchResult:
    """SxxEyy[Eyy...] 多集标记，同一结果中的多集必须属于同一季"""
    for m in patterns.SEASON_MULTI_EP.finditer(name):
        season = _safe_int(m.group(1))
        if season is None:
            continue
        if result.season < 0:
            result.season = season
            logger.debug(f"识别到季数 '{season}' (多集标记)")
        if result.season != season:
            logger.debug(f"又识别到季数 {season}，但已确定季数 {result.season}，忽略")
            continue
        for m2 in patterns.EPISODE_PATTERN.finditer(m.group(2)):
            episode = _safe_int(m2.group(1))
            # 允许第 0 集
            if episode is not None and result.add_episode(episode):
                logger.debug(f"识别到集数 '{episode}'")
    return result


def parse_season_multi_ep2(result: MatchResult, name: str) -> MatchResult:
    """1x02[x03...] 多集标记"""
    for m in patterns.SEASON_MULTI_EP_2.finditer(name):
        season = _safe_int(m.group(1))
        if season is None:
            continue
        if m.group(2) and result.season < 0:
            result.season = season
            logger.debug(f"识别到季数 '{season}' (NxNN 标记)")
        if result.season != season:
            logger.debug(f"又识别到季数 {season}，但已确定季数 {result.season}，忽略")
            continue
        for m2 in patterns.EPISODE_PATTERN.finditer(m.group(2)):
            episode = _safe_int(m2.group(1))
            if episode is not None and episode > 0 and result.add_episode(episode):
                logger.debug(f"识别到集数 '{episode}'")
    return result


def parse_episode_pattern(result: MatchResult, name: str) -> MatchResult:
    """仅集号的格式：先尝试 (1/6) 形式，再尝试 episode / ep + 数字"""
    if not result.episodes:
        for m in patterns.EPISODE_PATTERN_NR.finditer(name):
            episode = _safe_int(m.group(1))
            total = _safe_int(m.group(2))
            if episode is None or total is None:
                continue
            if 0 < episode <= total and result.add_episode(episode):
                logger.debug(f"识别到集数 '{episode}' (第 {episode}/{total} 部分)")

    if not result.episodes:
        for m in patterns.EPISODE_PATTERN_2.finditer(name):
            episode = _safe_int(m.group(1))
            if episode is not None and episode > 0 and result.add_episode(episode):
                logger.debug(f"识别到集数 '{episode}' (episode 标记)")
    return result


def parse_roman(result: MatchResult, name: str) -> MatchResult:
    """Part / Pt + 罗马数字，仅在尚未找到任何集号时使用"""
    if not result.episodes:
        for m in patterns.ROMAN_PATTERN.finditer(name):
            episode = decode_roman(m.group(2))
            if episode > 0 and result.add_episode(episode):
                logger.debug(f"识别到集数 '{episode}' (罗马数字 {m.group(2)})")
    return result


def parse_date_pattern(result: MatchResult, name: str) -> MatchResult:
    """
    日期格式 yyyy-mm-dd / dd-mm-yyyy

    匹配到日期时年份同时写入 season（日更节目以年份为季）。
    无效日历日期视为未匹配。
    """
    m = patterns.DATE_1.search(name)
    if m:
        parsed = _build_date(m.group(1), m.group(2), m.group(3))
        if parsed is not None:
            result.season = int(m.group(1))
            result.date = parsed
            logger.debug(f"识别到日期 {parsed}，年份作为季数 '{result.season}'")
            return result

    m = patterns.DATE_2.search(name)
    if m:
        parsed = _build_date(m.group(3), m.group(2), m.group(1))
        if parsed is not None:
            result.season = int(m.group(3))
            result.date = parsed
            logger.debug(f"识别到日期 {parsed}，年份作为季数 '{result.season}'")
    return result


def _numeric_tokens(text: str) -> List[str]:
    return [t for t in patterns.NUMBER_SPLIT_RE.split(text) if patterns.DIGITS_ONLY_RE.fullmatch(t)]


def _parse_numbers_4(result: MatchResult, numbers: List[str]) -> None:
    # SSEE 只在季数已确定且一致时接受
    for num in numbers:
        if len(num) != 4:
            continue
        season, episode = int(num[:2]), int(num[2:])
        if result.season == season and episode > 0 and result.add_episode(episode):
            logger.debug(f"识别到集数 '{episode}' (SSEE)")


def _parse_numbers_3(result: MatchResult, numbers: List[str]) -> None:
    # SEE 会遍历全部 3 位数字，在同一季下累积集号
    for num in numbers:
        if len(num) != 3:
            continue
        season, episode = int(num[:1]), int(num[1:])
        if result.season in (-1, season):
            if episode > 0 and result.add_episode(episode):
                logger.debug(f"识别到集数 '{episode}' (SEE)")
            result.season = season


def _parse_numbers_single(result: MatchResult, numbers: List[str], length: int) -> None:
    for num in numbers:
        if len(num) == length:
            episode = int(num)
            if episode > 0 and result.add_episode(episode):
                logger.debug(f"识别到集数 '{episode}' ({length} 位数字)")
            return


def parse_numbers(result: MatchResult, name: str) -> MatchResult:
    """
    通用数字兜底

    去掉 [..] / {..} 可选块后按分隔符切分，只保留纯数字片段；
    若一个都没有，则改用可选块内部的数字。反转顺序使靠后的数字优先，
    依次尝试 4 位 (SSEE)、3 位 (SEE)、2 位、1 位。
    """
    numbers = _numeric_tokens(patterns.OPTIONALS_RE.sub('', name))
    if not numbers:
        for m in patterns.OPTIONALS_RE.finditer(name):
            numbers.extend(_numeric_tokens(f" {m.group(1)} "))
    numbers.reverse()

    _parse_numbers_4(result, numbers)
    if not result.episodes:
        _parse_numbers_3(result, numbers)
    if not result.episodes:
        _parse_numbers_single(result, numbers, 2)
    if not result.episodes:
        _parse_numbers_single(result, numbers, 1)
    return result


_POST_CLEAN_PATTERNS = (
    patterns.SEASON_LONG,
    patterns.SEASON_MULTI_EP,
    patterns.SEASON_MULTI_EP_2,
    patterns.EPISODE_PATTERN,
    patterns.EPISODE_PATTERN_2,
    patterns.NUMBERS_3,
    patterns.NUMBERS_2,
    patterns.ROMAN_PATTERN,
    patterns.DATE_1,
    patterns.DATE_2,
    patterns.SEASON_ONLY,
)


def post_clean(result: MatchResult) -> MatchResult:
    """从 name 中剥离季/集/日期/数字标记得到 cleaned_name，并对集号排序"""
    cleaned = result.name
    for pattern in _POST_CLEAN_PATTERNS:
        cleaned = pattern.sub('', cleaned, count=1)
    cleaned = patterns.LEADING_SEPARATORS_RE.sub('', cleaned)
    cleaned = patterns.TRAILING_SEPARATORS_RE.sub('', cleaned)
    result.cleaned_name = cleaned
    result.episodes.sort()
    return result


# ============================================================================
# 动漫命名
# ============================================================================

def _anime_season(value: str) -> Optional[int]:
    # 目录名为 Specials 时归为第 0 季
    if value.lower() == "specials":
        return 0
    return _safe_int(value)


def parse_anime_exclusive(result: MatchResult, name: str) -> MatchResult:
    """带 8 位校验码的动漫发布命名，按 PREPEND1~4 的优先级依次尝试"""
    m = patterns.ANIME_PREPEND1.search(name)
    if m:
        episode = _safe_int(m.group(2))
        if episode is not None:
            logger.debug(f"按动漫 PREPEND1 解析 '{name}'")
            result.add_episode(episode)
            result.season = 0

    if not result.episodes:
        m = patterns.ANIME_PREPEND2.search(name)
        if m:
            episode, season = _safe_int(m.group(2)), _anime_season(m.group(1))
            if episode is not None and season is not None:
                logger.debug(f"按动漫 PREPEND2 解析 '{name}'")
                result.add_episode(episode)
                result.season = season

    if not result.episodes:
        m = patterns.ANIME_PREPEND3.search(name)
        if m:
            episode, season = _safe_int(m.group(2)), _safe_int(m.group(1))
            if episode is not None and season is not None:
                logger.debug(f"按动漫 PREPEND3 解析 '{name}'")
                result.add_episode(episode)
                result.season = season

    if not result.episodes:
        m = patterns.ANIME_PREPEND4.search(name)
        if m:
            episode = _safe_int(m.group(2))
            if episode is not None:
                logger.debug(f"按动漫 PREPEND4 解析 '{name}'")
                result.add_episode(episode)
                result.season = 1
                # 多集连写时主模式只能拿到首尾，拆开补全
                m = patterns.ANIME_PREPEND4_2.search(name)
                if m:
                    logger.debug(f"按动漫 PREPEND4_2 解析 '{name}'")
                    for num in m.group(1).split('-'):
                        extra = _safe_int(num)
                        if extra is not None:
                            result.add_episode(extra)
                    result.episodes.sort()
    return result


def parse_anime_no_hash(result: MatchResult, name: str) -> MatchResult:
    """不带校验码的动漫命名，锚定到字符串结尾，用于补全季数"""
    m = patterns.ANIME_APPEND1.search(name)
    if m:
        episode = _safe_int(m.group(2))
        if episode is not None:
            logger.debug(f"按动漫 APPEND1 解析 '{name}'")
            result.add_episode(episode)
            result.season = 0

    if not result.episodes or result.season == -1:
        m = patterns.ANIME_APPEND2.search(name)
        if m:
            episode, season = _safe_int(m.group(2)), _anime_season(m.group(1))
            if episode is not None and season is not None:
                logger.debug(f"按动漫 APPEND2 解析 '{name}'")
                result.add_episode(episode)
                result.season = season

    if not result.episodes or result.season == -1:
        m = patterns.ANIME_APPEND3.search(name)
        if m:
            episode, season = _safe_int(m.group(2)), _safe_int(m.group(1))
            if episode is not None and season is not None:
                logger.debug(f"按动漫 APPEND3 解析 '{name}'")
                result.add_episode(episode)
                result.season = season

    if not result.episodes or result.season == -1:
        m = patterns.ANIME_APPEND4.search(name)
        if m:
            episode = _safe_int(m.group(2))
            if episode is not None:
                logger.debug(f"按动漫 APPEND4 解析 '{name}'")
                if episode > 0:
                    result.add_episode(episode)
                result.season = 1
    return result


# ============================================================================
# 识别流水线
# ============================================================================

def detect(name: str, showname: Optional[str] = None) -> MatchResult:
    """
    对单个候选字符串执行完整的识别级联

    Args:
        name: 相对路径或文件名（如 "Show/Season 1/Show.S01E02.mkv"）
        showname: 剧集名，可为空

    Returns:
        MatchResult，未识别出的字段保持哨兵值
    """
    logger.debug(f"解析 '{name}'")
    result = MatchResult()
    filename = get_file_name(name)

    # 光盘结构文件本身不含剧集信息，改用所在目录
    if patterns.DISC_SET_FILE_RE.fullmatch(filename.lower()):
        name = get_folder_path(name)

    basename = remove_stopwords(name)
    foldername = ""
    m = patterns.FOLDER_RE.match(basename)
    if m:
        foldername = m.group(1)
        basename = basename[m.end():]

    # 只解析文件名、但文件名被完全剥离时会走到这里
    if not basename and not foldername:
        return result

    basename = patterns.EXTENSION_RE.sub('', basename, count=1)
    basename = patterns.BRACKET_YEAR_RE.sub('', basename, count=1)
    basename = patterns.BRACKET_CRC_RE.sub('', basename, count=1)

    # 前后补空格，便于不依赖 ^$ 的匹配
    basename = f" {basename} "
    foldername = f" {foldername} "

    result.stacking_marker_found = bool(get_stacking_marker(filename))
    result.name = basename.strip()

    parse_season_long(result, basename + foldername)
    if result.season != -1:
        basename = patterns.SEASON_LONG.sub('', basename)
        foldername = patterns.SEASON_LONG.sub('', foldername)
    parse_season_multi_ep(result, basename + foldername)
    parse_season_multi_ep2(result, basename + foldername)
    parse_episode_pattern(result, basename)

    # 长季标记没找到时，只有在有目录名（第二轮）时才用短季标记
    if result.season == -1 and foldername.strip():
        parse_season_only(result, foldername)

    if result.episodes:
        return post_clean(result)

    # 所有带季数的模式都已尝试过，此时可以去掉剧集名（哪怕是 "24" 这样的名字）
    if showname:
        basename, foldername = strip_show_name(basename, foldername, showname)

    # ==================== 以下仅在没有结果时尝试 ====================
    parse_roman(result, basename)
    if result.episodes:
        return post_clean(result)

    parse_date_pattern(result, basename)
    if result.date is not None:
        # 有日期的剧集不再按纯数字识别集号
        return post_clean(result)

    if is_disc_file(filename):
        return post_clean(result)

    if result.season == -1:
        parse_season_only(result, basename + foldername)
        if result.season != -1:
            foldername = patterns.SEASON_ONLY.sub('', foldername)
            basename = patterns.SEASON_ONLY.sub('', basename)

    if not result.episodes:
        parse_episode_only(result, basename)
    if result.episodes:
        return post_clean(result)

    parse_numbers(result, basename)
    return post_clean(result)


# ============================================================================
# 文件名识别入口
# ============================================================================

def _parse_date_only(name: str) -> Optional[datetime.date]:
    # 只取日期，不把年份当作季数
    return parse_date_pattern(MatchResult(), name).date


def _detect_episode(name: str, showname: Optional[str]) -> MatchResult:
    # 动漫命名优先，直接使用未修改的路径
    result = MatchResult()
    name_no_ext = patterns.EXTENSION_RE.sub('', name, count=1)
    parse_anime_exclusive(result, name_no_ext)
    if result.episodes:
        if result.date is None:
            result.date = _parse_date_only(name)
        return result

    # 先只看文件名
    result = detect(get_file_name(name), showname)

    if result.episodes and result.season == -1:
        # 只有集号没有季数：解析整个路径
        whole = detect(name, showname)
        # 集数个数相同才采用
        if whole.season != -1 and len(whole.episodes) == len(result.episodes):
            result = whole
        else:
            result.season = whole.season
            parse_anime_no_hash(result, name)
    elif not result.episodes and result.date is None:
        result = detect(name, showname)

    if result.date is None:
        result.date = _parse_date_only(name)

    # 只有集号时默认第 1 季
    if result.episodes and -1 not in result.episodes and result.season == -1:
        result.season = 1
    return result


def detect_episode_from_filename(name: str, showname: Optional[str] = None,
                                 cache: Optional[ResultCache] = None) -> MatchResult:
    """
    识别相对路径对应的季数与集数

    先做动漫专用预解析，再按 "仅文件名 → 整个路径" 两轮执行识别流水线。
    传入 cache 时结果按 "filename" 前缀缓存，重复调用直接命中。

    Args:
        name: 相对于剧集根目录的路径（如 "/dir2/seas1/fname.ext"）
        showname: 剧集名
        cache: 可选的结果缓存
    """
    cache_key = None
    if cache is not None:
        cache_key = generate_cache_key(FILENAME_CACHE_PREFIX, name, showname)
        cached = cache.get(cache_key)
        if cached is not None:
            logger.debug(f"使用缓存的识别结果: {name} (命中 {cache.hits} 次)")
            return cached

    result = _detect_episode(name, showname)

    if cache is not None:
        cache.put(cache_key, result)
    return result


# ============================================================================
# 中文剧集格式
# ============================================================================

def parse_chinese_episode_format(result: MatchResult, name: str) -> MatchResult:
    """
    解析中文剧集格式

    依次尝试: 第X季第Y集 → 第Y集 → Y集 → 第X部(分) → 第X章 → 标题中的罗马数字 → 第X季
    """
    m = patterns.CHINESE_SEASON_EPISODE_PATTERN.search(name)
    if m:
        season = chinese_to_int(m.group(1))
        episode = _safe_int(m.group(2))
        if season > 0 and episode is not None and episode > 0:
            result.season = season
            result.add_episode(episode)
            logger.debug(f"中文季集格式: 第 {season} 季 第 {episode} 集")
            return result

    m = patterns.CHINESE_EPISODE_PATTERN.search(name)
    if m:
        episode = _safe_int(m.group(1))
        if episode is not None and episode > 0:
            result.add_episode(episode)
            logger.debug(f"中文集数格式: 第 {episode} 集")

    if not result.episodes:
        m = patterns.CHINESE_EPISODE_EXTENDED.search(name)
        if m:
            episode = _safe_int(m.group(1))
            if episode is not None and 0 < episode <= MAX_CHINESE_EPISODE:
                result.add_episode(episode)
                logger.debug(f"中文扩展集数格式: {episode} 集")

    if not result.episodes:
        m = patterns.CHINESE_PART_PATTERN.search(name)
        if m:
            part = chinese_to_int(m.group(1))
            if part > 0:
                result.add_episode(part)
                logger.debug(f"中文部分格式: 第 {part} 部分")

    if not result.episodes:
        m = patterns.CHINESE_CHAPTER_PATTERN.search(name)
        if m:
            chapter = chinese_to_int(m.group(1))
            if chapter > 0:
                result.add_episode(chapter)
                logger.debug(f"中文章节格式: 第 {chapter} 章")

    if not result.episodes:
        m = patterns.ROMAN_NUMERAL_TITLE.search(name)
        if m:
            value = decode_roman(m.group(1))
            if 0 < value <= MAX_TITLE_ROMAN:
                result.add_episode(value)
                logger.debug(f"罗马数字格式: {m.group(1)} → 第 {value} 集")

    if result.season == -1:
        m = patterns.CHINESE_SEASON_PATTERN.search(name)
        if m:
            season = chinese_to_int(m.group(1))
            if season > 0:
                result.season = season
                logger.debug(f"中文季数格式: 第 {season} 季")
    return result


# ============================================================================
# 集标题清理
# ============================================================================

def _remove_episode_variants_from_title(title: str) -> str:
    backup = title
    for variant_re in patterns.TITLE_EPISODE_VARIANT_RES:
        title = variant_re.sub('', title)

    parts = [p for p in patterns.TITLE_SPLIT_RE.split(title)
             if p and not patterns.IMDB_ID_RE.fullmatch(p)]
    cleaned = " ".join(parts).strip()
    if not cleaned:
        # 剥离过度，退回原标题的规范化形式
        cleaned = " ".join(p for p in patterns.TITLE_SPLIT_RE.split(backup) if p)
    return cleaned


def clean_episode_title(title: str, showname: Optional[str] = None) -> str:
    """
    从文件名中清理出集标题

    移除非法字符、停用词、分卷标记、目录前缀、开头的剧集名、扩展名、
    年份/校验码标签以及各种季集标记和 IMDb 编号。
    """
    basename = remove_stopwords(patterns.ILLEGAL_TITLE_CHARS_RE.sub('', title))
    basename = clean_folder_stacking_markers(basename)
    basename = patterns.FOLDER_RE.sub('', basename)
    basename = basename + " "

    if showname:
        basename = re.sub(r'^[^ES]' + re.escape(showname), '', basename, flags=re.IGNORECASE)
        try:
            basename = re.sub('^' + _delimited_show_name(showname), '', basename, flags=re.IGNORECASE)
        except re.error as e:
            logger.debug(f"剧集名 '{showname}' 无法构建分隔符模式: {e}")

    basename = patterns.EXTENSION_RE.sub('', basename.strip(), count=1)
    basename = patterns.BRACKET_YEAR_RE.sub('', basename, count=1)
    basename = patterns.BRACKET_CRC_RE.sub('', basename, count=1)
    return _remove_episode_variants_from_title(basename)

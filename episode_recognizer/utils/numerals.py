"""
数字编解码

罗马数字与中文数字到整数的转换，供季/集/部分标记解析使用。
两者均为无状态纯函数，解析失败时返回哨兵值而不抛异常。
"""

from typing import Optional

# ============================================================================
# 常量: 数字映射
# ============================================================================

ROMAN_VALUE_MAP = {'I': 1, 'V': 5, 'X': 10, 'L': 50, 'C': 100, 'D': 500, 'M': 1000}

# 仅支持单字数字，不支持 "十一" 这类组合
CHINESE_NUM_MAP = {
    '一': 1, '二': 2, '三': 3, '四': 4, '五': 5,
    '六': 6, '七': 7, '八': 8, '九': 9, '十': 10,
}


# ============================================================================
# 罗马数字
# ============================================================================

def decode_roman(s: Optional[str]) -> int:
    """
    将罗马数字字符串转换为整数（减法记法，大小写不敏感）

    从左到右扫描：当前字符值小于下一个字符值时减去，否则加上；最后一个字符总是加上。
    空字符串或包含非罗马数字字符时返回 0。
    """
    if not s:
        return 0
    values = []
    for ch in s.upper():
        value = ROMAN_VALUE_MAP.get(ch)
        if value is None:
            return 0
        values.append(value)

    result = 0
    for current, following in zip(values, values[1:]):
        if current < following:
            result -= current
        else:
            result += current
    return result + values[-1]


# ============================================================================
# 中文数字
# ============================================================================

def chinese_to_int(s: Optional[str]) -> int:
    """将中文数字（一~十）或阿拉伯数字字符串转换为整数，无法识别时返回 -1"""
    if not s:
        return -1
    if s.isascii() and s.isdigit():
        return int(s)
    return CHINESE_NUM_MAP.get(s, -1)

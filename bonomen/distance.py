from typing import Dict, List


def damerau_levenshtein(s1: str, s2: str) -> int:
    """Edit distance counting insertions, deletions, substitutions and
    adjacent transpositions (unrestricted variant: a transposed pair may
    be edited again, so distance("ca", "abc") == 2).
    """
    len1, len2 = len(s1), len(s2)
    if len1 == 0:
        return len2
    if len2 == 0:
        return len1

    inf = len1 + len2
    # last row in which each character of s1 was seen
    last_seen: Dict[str, int] = {}

    # (len1 + 2) x (len2 + 2), with a sentinel row/column of `inf`
    d: List[List[int]] = [[inf] * (len2 + 2) for _ in range(len1 + 2)]
    for i in range(len1 + 1):
        d[i + 1][1] = i
    for j in range(len2 + 1):
        d[1][j + 1] = j

    for i in range(1, len1 + 1):
        last_match_col = 0
        c1 = s1[i - 1]
        for j in range(1, len2 + 1):
            c2 = s2[j - 1]
            k = last_seen.get(c2, 0)
            l = last_match_col
            if c1 == c2:
                cost = 0
                last_match_col = j
            else:
                cost = 1
            d[i + 1][j + 1] = min(
                d[i][j] + cost,                           # substitution
                d[i + 1][j] + 1,                          # insertion
                d[i][j + 1] + 1,                          # deletion
                d[k][l] + (i - k - 1) + 1 + (j - l - 1),  # transposition
            )
        last_seen[c1] = i

    return d[len1 + 1][len2 + 1]

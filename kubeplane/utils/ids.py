import secrets

# 모음과 헷갈리기 쉬운 숫자를 뺀 문자 집합. 생성된 ID가 우연히 단어가 되는 것을 막습니다.
_ID_ALPHABET = "bcdfghjklmnpqrstvwxz2456789"


def generate_id(length: int = 10) -> str:
    """DNS 레이블로 그대로 쓸 수 있는 무작위 소문자/숫자 ID를 생성합니다."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))

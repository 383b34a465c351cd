"""Keyword- and type-driven column aliases for target fields.

Each builder recognises one family of fields, either by the field's declared
type or by keywords in its name or id, and contributes the column spellings
commonly used for that family (``fname`` / ``given_name`` for a first name,
``uid`` for a user id, ...). The registry unions the aliases of every builder
that handles a field.

Keywords match at the start of a word, so ``id`` fires for ``User ID`` and
``userId`` but not for ``Width``.
"""

import re
from functools import lru_cache
from typing import FrozenSet, Iterable, List, Optional, Sequence, Set

from src.CustomLogger.custom_logger import CustomLogger
from src.utils.similarity_utils import to_camel_case, to_snake_case

logger = CustomLogger().custlogger(loglevel='WARNING')

_WORD_SPLIT_RE = re.compile(r"[^a-z0-9]+")


def _words(text: str) -> List[str]:
    return [w for w in _WORD_SPLIT_RE.split(to_snake_case(text)) if w]


class FieldContext:
    """Words of a field's name and id, split once and shared by all builders."""

    def __init__(self, name: str, field_id: str, field_type: Optional[str] = None):
        self.name = name
        self.field_id = field_id
        self.field_type = (field_type or "").lower() or None
        self.words = _words(name) + _words(field_id)

    def has(self, *keywords: str) -> bool:
        return any(w.startswith(k) for k in keywords for w in self.words)


class BaseTokenBuilder:
    """Base class for all token builders."""

    priority: int = 0
    supported_types: Sequence[str] = ()
    keywords: Sequence[str] = ()

    def can_handle(self, ctx: FieldContext) -> bool:
        if ctx.field_type is not None and ctx.field_type in self.supported_types:
            return True
        return bool(self.keywords) and ctx.has(*self.keywords)

    def generate_tokens(self, ctx: FieldContext) -> Set[str]:
        raise NotImplementedError

    @staticmethod
    def case_variations(tokens: Iterable[str]) -> Set[str]:
        """Lowercase, snake_case and (lowercased) camelCase spellings."""
        out = set()
        for token in tokens:
            out.update({token.lower(), to_snake_case(token), to_camel_case(token).lower()})
        out.discard("")
        return out


class EmailTokenBuilder(BaseTokenBuilder):
    priority = 80
    supported_types = ("email",)
    keywords = ("email",)

    def generate_tokens(self, ctx):
        return self.case_variations(["email", "mail", "e_mail", "email_address"])


class PhoneTokenBuilder(BaseTokenBuilder):
    priority = 80
    supported_types = ("phone",)
    keywords = ("phone", "tel", "mobile", "cell")

    def generate_tokens(self, ctx):
        return self.case_variations(["phone", "tel", "telephone", "mobile", "cell", "phone_number"])


class UrlTokenBuilder(BaseTokenBuilder):
    priority = 80
    supported_types = ("url",)
    keywords = ("url", "link", "website")

    def generate_tokens(self, ctx):
        return self.case_variations(["url", "link", "website", "site", "web_address", "homepage"])


class IdTokenBuilder(BaseTokenBuilder):
    priority = 75
    keywords = ("id", "identifier", "uid")

    def generate_tokens(self, ctx):
        tokens = ["id", "identifier", "key", "primary_key", "pk"]
        if ctx.has("user"):
            tokens += ["user_id", "uid", "user_key"]
        if ctx.has("cust"):
            tokens += ["customer_id", "cust_id", "customer_key"]
        return self.case_variations(tokens)


class NameTokenBuilder(BaseTokenBuilder):
    """First, last and full person names; a bare ``name`` alias is not produced."""
    priority = 70

    def can_handle(self, ctx):
        return any(w.endswith("name") for w in ctx.words) or ctx.has("fname", "lname")

    def generate_tokens(self, ctx):
        tokens = []
        if ctx.has("first", "given", "fname"):
            tokens += ["first_name", "fname", "first", "given_name"]
        if ctx.has("last", "surname", "family", "lname"):
            tokens += ["last_name", "lname", "last", "surname", "family_name"]
        if ctx.has("full", "display"):
            tokens += ["full_name", "display_name", "complete_name"]
        return self.case_variations(tokens)


class AddressTokenBuilder(BaseTokenBuilder):
    priority = 70
    keywords = ("address", "street", "city", "state", "province", "zip", "postal", "country")

    def generate_tokens(self, ctx):
        tokens = []
        if ctx.has("address"):
            tokens += ["address", "addr", "street_address"]
        if ctx.has("street"):
            tokens += ["street", "st", "road", "rd", "avenue", "ave"]
        if ctx.has("city"):
            tokens += ["city", "town", "municipality"]
        if ctx.has("state", "province"):
            tokens += ["state", "province", "region"]
        if ctx.has("zip", "postal"):
            tokens += ["zip", "zip_code", "postal", "postal_code"]
        if ctx.has("country"):
            tokens += ["country", "nation", "country_code"]
        return self.case_variations(tokens)


class DateTimeTokenBuilder(BaseTokenBuilder):
    priority = 70
    supported_types = ("date", "datetime")
    keywords = ("date", "time", "created", "updated", "modified", "birth", "dob")

    def generate_tokens(self, ctx):
        tokens = ["date", "time", "datetime", "timestamp"]
        if ctx.has("created"):
            tokens += ["created", "created_at", "creation_date"]
        if ctx.has("updated", "modified"):
            tokens += ["updated", "updated_at", "modified", "modified_at"]
        if ctx.has("birth", "born", "dob"):
            tokens += ["birth_date", "dob", "date_of_birth", "born"]
        return self.case_variations(tokens)


class NumericTokenBuilder(BaseTokenBuilder):
    priority = 60
    supported_types = ("number", "integer", "decimal", "currency", "percentage")
    keywords = ("age", "count", "total", "amount", "price", "cost", "salary", "wage")

    def generate_tokens(self, ctx):
        tokens = []
        if ctx.has("age"):
            tokens += ["age", "years", "years_old"]
        if ctx.has("price", "cost", "salary", "wage", "amount", "money"):
            tokens += ["price", "cost", "salary", "wage", "amount", "money", "payment", "fee"]
        if ctx.has("count", "total", "number"):
            tokens += ["count", "total", "number", "qty", "quantity"]
        return self.case_variations(tokens)


class TokenBuilderRegistry:
    """Builders ordered by descending priority; every applicable one contributes."""

    def __init__(self, builders: Iterable[BaseTokenBuilder] = ()):
        self._builders: List[BaseTokenBuilder] = []
        for builder in builders:
            self.register(builder)

    def register(self, builder: BaseTokenBuilder) -> None:
        self._builders.append(builder)
        self._builders.sort(key=lambda b: b.priority, reverse=True)

    @property
    def builders(self) -> List[BaseTokenBuilder]:
        return list(self._builders)

    def generate_tokens(self, name: str, field_id: str, field_type: Optional[str] = None) -> Set[str]:
        ctx = FieldContext(name, field_id, field_type)
        tokens: Set[str] = set()
        for builder in self._builders:
            if builder.can_handle(ctx):
                tokens |= builder.generate_tokens(ctx)
        logger.debug(f"[Tokens] '{name}' ({field_type}): {len(tokens)} aliases")
        return tokens


default_registry = TokenBuilderRegistry([
    EmailTokenBuilder(),
    PhoneTokenBuilder(),
    UrlTokenBuilder(),
    IdTokenBuilder(),
    NameTokenBuilder(),
    AddressTokenBuilder(),
    DateTimeTokenBuilder(),
    NumericTokenBuilder(),
])


@lru_cache(maxsize=1024)
def field_aliases(name: str, field_id: str, field_type: Optional[str] = None) -> FrozenSet[str]:
    """Lowercase alias spellings for a target field from the default registry."""
    return frozenset(default_registry.generate_tokens(name, field_id, field_type))


def add_token_builder(builder: BaseTokenBuilder) -> None:
    """Register an extra builder with the default registry."""
    default_registry.register(builder)
    field_aliases.cache_clear()


def column_forms(column: str) -> Set[str]:
    """Lowercase, snake_case and separator-free spellings of an import column."""
    snake = to_snake_case(column)
    forms = {column.strip().lower(), snake, snake.replace("_", "")}
    forms.discard("")
    return forms

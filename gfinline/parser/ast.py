from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional


@dataclass(frozen=True)
class Located:
    line: int
    column: int


@dataclass
class TypeDecl:
    name: str
    supertypes: List[str]
    loc: Located


@dataclass
class ParamDecl:
    # "plain", "default", "star", "kwstar"
    kind: str
    name: Optional[str]
    loc: Located
    default: Any = None


@dataclass
class GenericDecl:
    name: str
    params: List[ParamDecl]
    loc: Located
    precedence: Optional[List[str]] = None


@dataclass
class SpecDecl:
    # "any", "type", "value"
    kind: str
    loc: Located
    name: Optional[str] = None
    value: Any = None


@dataclass
class MethodDecl:
    generic: str
    specs: List[SpecDecl]
    loc: Located


@dataclass
class Program:
    types: List[TypeDecl] = field(default_factory=list)
    generics: List[GenericDecl] = field(default_factory=list)
    methods: List[MethodDecl] = field(default_factory=list)


@dataclass
class CallArg:
    # "top", "type", "literal"
    kind: str
    loc: Located
    name: Optional[str] = None
    value: Any = None


@dataclass
class CallExpr:
    name: str
    args: List[CallArg]
    loc: Located

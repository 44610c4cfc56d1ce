"""成功/失败二选一的结果类型。

管道中每个可能失败的阶段都返回 ``Result``，而不是抛异常：

- Ok(value): 阶段成功，value 交给下一阶段。
- Err(error): 阶段失败，error 直接交给错误分类器，管道就此终止。

这样每个出口在函数签名里都是可见的。
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E


Result = Union[Ok[T], Err[E]]

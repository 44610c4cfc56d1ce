"""领域层模型。

包含：
- models: ChatMessage / CompletionRequest / CompletionSuccess / RelayFailure 等数据结构。
- result: Ok / Err 结果类型。
- errors: 失败类别与传输层失败模型。
- exceptions: 业务异常类型定义。
"""

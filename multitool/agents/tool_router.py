"""
工具路由链

把注册表中的工具绑定到 Chat Model，由模型决定调用哪些工具（可一次请求多个），
再把解析出的调用记录交给分发器执行。

链结构:
    ChatPromptTemplate | model.bind_tools(tools) | JsonOutputToolsParser | ToolDispatcher

技术栈:
    - LangChain Core（Runnable 组合、工具调用解析）
    - langchain-openai（OpenAI 兼容 Chat Model）

使用示例:
    python -m multitool.agents.tool_router --provider deepseek
"""

import argparse
import asyncio
import logging
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.output_parsers.openai_tools import JsonOutputToolsParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.runnables import Runnable, RunnableLambda

from multitool.config.settings import get_settings
from multitool.core import LLMFactory, load_llm_config
from multitool.core.dispatcher import AnnotatedResult, ToolDispatcher
from multitool.core.logger_config import setup_logging
from multitool.core.logging_context import set_request_id
from multitool.core.tool_context import ensure_call_log
from multitool.core.tool_errors import ToolError
from multitool.tools.math_tools import build_math_registry
from multitool.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = """You are an assistant that answers by calling tools.

Available tools:
{tools}

Rules:
1. Never compute results yourself, always call the matching tool.
2. If the request needs several independent calculations, call several tools at once.
3. Only use the tools listed above."""


def build_tool_router(
    model: BaseChatModel,
    registry: ToolRegistry,
    *,
    dispatcher: Optional[ToolDispatcher] = None,
    system_prompt: str = DEFAULT_SYSTEM_PROMPT,
) -> Runnable:
    """
    构建工具路由链

    Args:
        model: 支持 bind_tools 的 Chat Model
        registry: 工具注册表
        dispatcher: 工具分发器，默认基于 registry 创建
        system_prompt: 系统提示词，可包含 {tools} 占位符

    Returns:
        Runnable: 输入 {"input": str}，输出 List[AnnotatedResult]

    LangChain 在上下文副本中执行各步骤，调用方若要通过 get_call_logs() 读取本次调用日志，
    需先在自身上下文调用 ensure_call_log()（route_message 已处理）。
    """
    dispatcher = dispatcher or ToolDispatcher(registry)

    prompt = ChatPromptTemplate.from_messages(
        [("system", system_prompt), ("human", "{input}")]
    )
    if "tools" in prompt.input_variables:
        prompt = prompt.partial(tools=registry.describe())

    model_with_tools = model.bind_tools(registry.as_openai_tools())
    call_tools = RunnableLambda(
        dispatcher.dispatch_all,
        afunc=dispatcher.adispatch_all,
        name="call_tools",
    )

    return prompt | model_with_tools | JsonOutputToolsParser(return_id=True) | call_tools


async def route_message(chain: Runnable, message: str) -> List[AnnotatedResult]:
    """让模型为一条用户消息选择工具并执行"""
    logger.info(f"路由消息: {message[:200]}")
    ensure_call_log()
    results = await chain.ainvoke({"input": message})
    if not results:
        logger.info("模型未请求任何工具调用")
    return results


def format_results(results: List[AnnotatedResult]) -> str:
    """把调用结果格式化为命令行输出"""
    if not results:
        return "(no tool calls)"
    lines = []
    for result in results:
        args = ", ".join(f"{k}={v!r}" for k, v in result.args.items())
        lines.append(f"{result.type}({args}) -> {result.output}")
    return "\n".join(lines)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="用 LLM 把自然语言请求路由到数学工具")
    parser.add_argument(
        "--provider",
        type=str,
        default=None,
        help="LLM 提供商（openai/deepseek/dashscope），默认读取 llm.yaml 的 default 段",
    )
    parser.add_argument(
        "--message",
        "-m",
        type=str,
        default=None,
        help="只处理这一条消息后退出",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    """
    主函数：多轮对话，每轮把用户输入路由到工具并打印结果

    输入 'quit' 或 'exit' 退出。
    """
    load_dotenv()
    args = _parse_args(argv)
    setup_logging(get_settings().log_level)

    config = load_llm_config(provider=args.provider)
    model = LLMFactory.create_llm_cached(config)
    chain = build_tool_router(model, build_math_registry())

    messages: List[str] = [args.message] if args.message else []
    interactive = not messages

    if interactive:
        print("=" * 60)
        print(f"Tool router ({config.provider.value}/{config.model_name})")
        print("输入 'quit' 或 'exit' 退出")
        print("=" * 60)

    turn = 0
    while True:
        if interactive:
            try:
                user_input = input("\n你: ").strip()
            except (EOFError, KeyboardInterrupt):
                print("\n再见！")
                break
            if user_input.lower() in ["quit", "exit", "退出"]:
                print("\n再见！")
                break
            if not user_input:
                continue
        elif turn < len(messages):
            user_input = messages[turn]
        else:
            break

        turn += 1
        set_request_id(f"turn-{turn}")
        try:
            results = asyncio.run(route_message(chain, user_input))
        except ToolError as e:
            print(f"工具错误: {e}")
            continue
        print(format_results(results))


__all__ = [
    "DEFAULT_SYSTEM_PROMPT",
    "build_tool_router",
    "route_message",
    "format_results",
    "main",
]


if __name__ == "__main__":
    main()

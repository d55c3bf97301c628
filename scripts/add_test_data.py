#!/usr/bin/env python3
"""Post a handful of sample dialogues to a running server.

Usage:
    uv run python scripts/add_test_data.py
    uv run python scripts/add_test_data.py --base-url http://localhost:3001/api
"""

import argparse
import sys
import time
from pathlib import Path

import httpx

# Allow running from project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dialog_digest.config import settings

SAMPLE_DIALOGUES = [
    {"role": "user", "content": "如何创建一个React组件？"},
    {
        "role": "assistant",
        "content": (
            "要创建一个React组件，你可以使用函数式组件或类组件。函数式组件是推荐的方式：\n\n"
            "```jsx\nfunction MyComponent() {\n  return <div>Hello World</div>;\n}\n```"
        ),
    },
    {"role": "user", "content": "TypeScript中的泛型是什么？"},
    {
        "role": "assistant",
        "content": (
            "TypeScript中的泛型（Generics）是一种创建可重用组件的工具。\n\n基本语法：\n"
            "```typescript\nfunction identity<T>(arg: T): T {\n  return arg;\n}\n```"
        ),
    },
    {"role": "user", "content": "如何优化React应用的性能？"},
    {
        "role": "assistant",
        "content": (
            "优化React应用性能的几种方法：\n\n"
            "1. **使用React.memo**: 防止不必要的重新渲染\n"
            "2. **使用useMemo和useCallback**: 缓存计算结果和函数\n"
            "3. **代码分割**: 使用React.lazy和Suspense\n"
            "4. **虚拟化长列表**: 使用react-window\n"
            "5. **优化状态管理**: 避免不必要的状态更新"
        ),
    },
]


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--base-url",
        default=f"http://{settings.http_host}:{settings.http_port}/api",
        help="API base URL",
    )
    parser.add_argument("--repository", default="my-project")
    parser.add_argument("--workspace", default="/Users/test/project")
    parser.add_argument("--delay", type=float, default=0.5, help="Seconds between posts")
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url, timeout=10) as client:
        for i, dialogue in enumerate(SAMPLE_DIALOGUES, 1):
            body = {**dialogue, "repository": args.repository, "workspace": args.workspace}
            try:
                resp = client.post("/dialogues", json=body)
                resp.raise_for_status()
            except httpx.HTTPError as exc:
                print(f"[{i}/{len(SAMPLE_DIALOGUES)}] failed: {exc}", file=sys.stderr)
                sys.exit(1)
            preview = dialogue["content"][:50]
            print(f"[{i}/{len(SAMPLE_DIALOGUES)}] added: {dialogue['role']} - {preview}")
            time.sleep(args.delay)

    print("Done. Trigger a summary with: POST /api/analyze/<YYYY-MM-DD>")


if __name__ == "__main__":
    main()

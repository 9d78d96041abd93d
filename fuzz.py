#!/usr/bin/env python3
"""
Random fuzzer for the cleaner.
Generates malformed and hostile markup, cleans it, and checks that the output
never carries anything the policy forbids.
"""

import argparse
import random
import string
import sys
import time
import traceback

from cleanhtml import Cleaner, NodeType, SanitizationPolicy, UrlRule, parse_body_fragment, to_html

TAGS = [
    "div", "span", "p", "a", "img", "b", "i", "em", "strong", "ul", "ol", "li",
    "table", "tr", "td", "form", "input", "textarea", "script", "style", "svg",
    "math", "iframe", "object", "template", "noscript", "xmp", "title", "meta",
    "link", "base", "select", "option", "pre", "code", "blockquote", "frameset",
]

ATTRIBUTES = [
    "id", "class", "style", "href", "src", "alt", "title", "rel", "onclick",
    "onerror", "onload", "data-x", "srcdoc", "formaction", "xlink:href",
]

HOSTILE_URLS = [
    "javascript:alert(1)",
    "JaVaScRiPt:alert(1)",
    "java\tscript:alert(1)",
    " \x01javascript:alert(1)",
    "data:text/html,<script>alert(1)</script>",
    "vbscript:msgbox(1)",
    "//evil.example/x",
    "\\\\evil.example/x",
    "https://example.com/ok",
    "/relative/ok",
    "#frag",
]

SPECIAL_CHARS = ["\x00", "\x0b", "\x0c", "\x7f", "\ufffd", "\u00a0", "\u200b", "\ufeff"]

# The policy under test: small, with URL rules and an enforced attribute.
POLICY = SanitizationPolicy(
    allowed_tags={"div", "span", "p", "a", "img", "b", "i", "em", "strong", "ul", "ol", "li", "pre", "code", "style"},
    allowed_attributes={"*": {"title", "class"}, "a": {"href"}, "img": {"src", "alt"}},
    url_rules={
        ("a", "href"): UrlRule(allowed_schemes={"http", "https", "mailto"}),
        ("img", "src"): UrlRule(allowed_schemes={"https"}),
    },
    enforced_attrs={"a": {"rel": "nofollow"}},
)

FORBIDDEN_NODE_TYPES = (NodeType.COMMENT, NodeType.DOCTYPE, NodeType.PROCESSING_INSTRUCTION)


def random_string(min_len=0, max_len=20):
    """Generate random ASCII string."""
    length = random.randint(min_len, max_len)
    return "".join(random.choices(string.ascii_letters + string.digits, k=length))


def fuzz_attribute():
    """Generate a possibly hostile attribute."""
    name = random.choice(ATTRIBUTES)
    if random.random() < 0.2:
        name = name.upper()
    if name in ("href", "src", "formaction", "xlink:href"):
        value = random.choice(HOSTILE_URLS)
    else:
        value = random.choice([random_string(), "x()", "<b>", '"', "'", random.choice(SPECIAL_CHARS)])
    quote = random.choice(['"', "'", ""])
    if quote == "" and any(c in value for c in " \t\n\"'<>=`"):
        quote = '"'
    return f"{name}={quote}{value}{quote}"


def fuzz_open_tag():
    tag = random.choice(TAGS)
    attrs = " ".join(fuzz_attribute() for _ in range(random.randint(0, 4)))
    closing = random.choice([">", "/>", " >", ""])
    return f"<{tag} {attrs}{closing}"


def fuzz_close_tag():
    return f"</{random.choice(TAGS)}>"


def fuzz_comment():
    content = random_string(0, 30)
    return random.choice([f"<!--{content}-->", f"<!--{content}", f"<!{content}>", "<!-->", f"<?{content}?>"])


def fuzz_doctype():
    return random.choice(["<!DOCTYPE html>", "<!doctype>", "<!DOCTYPE " + random_string() + ">"])


def fuzz_raw_data():
    """Script and style bodies, sometimes unterminated."""
    tag = random.choice(["script", "style"])
    content = random.choice(["alert(1)", "p{color:red}", "</b><i>", random_string()])
    end = random.choice([f"</{tag}>", "", f"</{tag.upper()}>"])
    return f"<{tag}>{content}{end}"


def fuzz_text():
    strategies = [
        lambda: random_string(1, 40),
        lambda: random.choice(["&amp;", "&lt;", "&", "&#0;", "&#x110000;", "&nbsp"]),
        lambda: "".join(random.choices(SPECIAL_CHARS, k=random.randint(1, 5))),
        lambda: "<" + random_string(1, 5),
    ]
    return random.choice(strategies)()


def fuzz_nested_structure(depth=0, max_depth=8):
    """Generate nested (possibly mismatched) structure."""
    if depth >= max_depth or random.random() < 0.3:
        return fuzz_text()
    tag = random.choice(TAGS)
    content = "".join(fuzz_nested_structure(depth + 1, max_depth) for _ in range(random.randint(0, 3)))
    if random.random() < 0.2:
        return f"<{tag}>{content}"
    if random.random() < 0.1:
        return f"<{tag}>{content}</{random.choice(TAGS)}>"
    return f"<{tag}>{content}</{tag}>"


def generate_fuzzed_html():
    """Generate one fuzzed body fragment."""
    parts = []
    if random.random() < 0.2:
        parts.append(fuzz_doctype())
    for _ in range(random.randint(1, 15)):
        generator = random.choices(
            [fuzz_open_tag, fuzz_close_tag, fuzz_comment, fuzz_raw_data, fuzz_text, fuzz_nested_structure],
            weights=[20, 10, 6, 6, 15, 10],
        )[0]
        parts.append(generator())
    return "".join(parts)


def find_violations(root):
    """Return descriptions of everything in the cleaned tree the policy forbids."""
    violations = []
    stack = [root]
    while stack:
        node = stack.pop()
        children = node.children or []
        for child in children:
            node_type = child.node_type
            if node_type in FORBIDDEN_NODE_TYPES:
                violations.append(f"{child.name} node in output")
            elif node_type is NodeType.ELEMENT:
                if not POLICY.is_safe_tag(child.name):
                    violations.append(f"disallowed <{child.name}> in output")
                for attribute in child.iter_attributes():
                    if not POLICY.is_safe_attribute(child.name, child, attribute):
                        violations.append(f"disallowed {attribute.name}={attribute.value!r} on <{child.name}>")
                if child.name == "a" and child.attrs.get("rel") != "nofollow":
                    violations.append("<a> without enforced rel")
                stack.append(child)
            elif node_type is NodeType.DATA and not POLICY.is_safe_tag(node.name):
                violations.append(f"raw data under <{node.name}>")
    return violations


def check_one(cleaner, html):
    """Clean `html` and return a list of problems (empty when all invariants hold)."""
    dirty = parse_body_fragment(html)
    before = to_html(dirty)
    result = cleaner.clean(dirty)
    problems = find_violations(result.root)
    if to_html(dirty) != before:
        problems.append("input document was modified")
    again = cleaner.clean(result.document)
    if not again.is_clean:
        problems.append(f"second pass removed {again.discarded_count} item(s)")
    if to_html(again.root) != to_html(result.root):
        problems.append("second pass changed the output")
    return problems


def run_fuzzer(num_tests, seed=None, verbose=False, save_failures=False):
    """Run the fuzzer against the cleaner."""
    if seed is not None:
        random.seed(seed)

    cleaner = Cleaner(POLICY)
    crashes = []
    violations = []

    print(f"Fuzzing cleaner with {num_tests} test cases...")
    start_time = time.time()

    for i in range(num_tests):
        html = generate_fuzzed_html()
        if verbose and i % 100 == 0:
            print(f"  Test {i}/{num_tests}...")
        try:
            problems = check_one(cleaner, html)
        except Exception as e:
            crashes.append({"test_num": i, "html": html, "error": str(e), "traceback": traceback.format_exc()})
            if verbose:
                print(f"  CRASH: Test {i}: {e}")
            continue
        if problems:
            violations.append({"test_num": i, "html": html, "problems": problems})
            if verbose:
                print(f"  VIOLATION: Test {i}: {problems[0]}")

    elapsed_total = time.time() - start_time

    print(f"\n{'=' * 60}")
    print("FUZZING RESULTS: cleaner")
    print(f"{'=' * 60}")
    print(f"Total tests:    {num_tests}")
    print(f"Crashes:        {len(crashes)}")
    print(f"Violations:     {len(violations)}")
    print(f"Total time:     {elapsed_total:.2f}s")

    for crash in crashes[:10]:
        print(f"\nCrash #{crash['test_num']}:")
        print(f"  HTML: {crash['html'][:200]!r}")
        print(f"  Error: {crash['error']}")
    for violation in violations[:10]:
        print(f"\nViolation #{violation['test_num']}:")
        print(f"  HTML: {violation['html'][:200]!r}")
        for problem in violation["problems"]:
            print(f"  - {problem}")

    if save_failures and (crashes or violations):
        filename = f"fuzz_failures_cleaner_{int(time.time())}.txt"
        with open(filename, "w") as f:
            f.write(f"Seed: {seed}\n\n")
            for crash in crashes:
                f.write(f"=== CRASH #{crash['test_num']} ===\n")
                f.write(f"HTML:\n{crash['html']}\n")
                f.write(f"Traceback:\n{crash['traceback']}\n\n")
            for violation in violations:
                f.write(f"=== VIOLATION #{violation['test_num']} ===\n")
                f.write(f"HTML:\n{violation['html']}\n")
                f.write("".join(f"- {p}\n" for p in violation["problems"]) + "\n")
        print(f"\nFailures saved to {filename}")

    return not crashes and not violations


def main():
    parser = argparse.ArgumentParser(description="Fuzz the cleaner with hostile markup")
    parser.add_argument("--num-tests", "-n", type=int, default=1000, help="Number of test cases (default: 1000)")
    parser.add_argument("--seed", "-s", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--save-failures", action="store_true", help="Save failures to a file")
    parser.add_argument("--sample", type=int, metavar="N", help="Just print N sample inputs (no cleaning)")
    args = parser.parse_args()

    if args.sample:
        if args.seed is not None:
            random.seed(args.seed)
        for i in range(args.sample):
            print(f"=== Sample {i + 1} ===")
            print(generate_fuzzed_html())
            print()
        return

    success = run_fuzzer(args.num_tests, seed=args.seed, verbose=args.verbose, save_failures=args.save_failures)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()

_HELP = """Track in-code annotations as a persistent checklist.

**Quick start:**

* `mrdm todo init` - Create .mrdm/config.json
* `mrdm todo list` - Assign ids and print the checklist
* `mrdm todo done` - Resolve finished and reopened items
* `mrdm todo list -o TODO.md` - Write a checklist with editor links
"""

#!/usr/bin/env python3
"""Abort report templates. Each template takes the joined commit blocks
(or the offending branch name) through str.format()."""

_RULE = "#" * 80


def _banner(title: str) -> str:
    return f"{_RULE}\n##{title.center(76)}##\n{_RULE}\n"


COMMIT_MESSAGE_ABORTED_MSG = _banner("!!! INVALID COMMIT MESSAGE(S) !!!") + """
The following commit message(s) do not follow this project's commit message
format:

{details}
Every commit subject must start with a tracking ticket in brackets, followed
by a short subject and an optional description:

  [JIRA-123] Subject - Description

A Remedy AR can be used as the ticket instead:

  [AR123456] Subject - Description
  [AR 123456] Subject - Description

The subject part is limited to 25 characters. Merge commits generated by git
("Merge branch ...") are accepted as they are.
"""

INSUFFICIENT_PERMISSIONS_MSG = _banner("!!! INSUFFICIENT PERMISSIONS !!!") + """
This project enforces branch-level permissions and the following commit(s)
exceed the access granted to their author:

{details}"""

INVALID_BRANCH_NAME_MSG = _banner("!!! INVALID BRANCH NAME !!!") + """
This project enforces a strict branch model. The branch being committed to or
pushed does not follow the branch naming rules:

  {branch}

Accepted branch names:

  master
  develop
  release/MAJOR.MINOR.PATCH-Comment
  hotfix/MAJOR.MINOR.PATCH-Comment
  feature/AR123456|JIRA-123[-MAJOR.MINOR.PATCH]-Comment
  bugfix/AR123456|JIRA-123[-MAJOR.MINOR.PATCH]-Comment
  attic/AR123456|JIRA-123[-MAJOR.MINOR.PATCH]-Comment
  support/AR123456|JIRA-123[-MAJOR.MINOR.PATCH]-Comment

SNAPSHOT versions are never accepted in branch names.
"""

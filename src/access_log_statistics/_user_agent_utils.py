"""Classification of raw user-agent strings into browser and operating system families."""

import functools

import user_agents

from ._globals import _QUOTE_CHARACTERS, UserAgentFamilies


@functools.lru_cache(maxsize=2**14)
def classify_user_agent(raw_user_agent: str) -> UserAgentFamilies:
    """
    Identify the browser and operating system families of a raw user-agent string.

    Unrecognized strings are reported with the generic family 'Other'.
    """
    user_agent_string = raw_user_agent.strip().strip(_QUOTE_CHARACTERS)
    user_agent = user_agents.parse(user_agent_string)

    browser_family = user_agent.browser.family or "Other"
    os_family = user_agent.os.family or "Other"

    return UserAgentFamilies(browser_family=browser_family, os_family=os_family)

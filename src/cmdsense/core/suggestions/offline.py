"""
Static tables and heuristics used when no remote service is available.

The tables double as the fuzzy-matching vocabulary and as the flag source
for context completions.
"""

from typing import Dict, List

from .types import CompletionSuggestion, SuggestionSource


BASIC_COMMANDS: Dict[str, str] = {
    'ls': 'List directory contents',
    'cd': 'Change directory',
    'mkdir': 'Make directories',
    'rm': 'Remove files or directories',
    'cp': 'Copy files and directories',
    'mv': 'Move/rename files',
    'cat': 'Display file contents',
    'grep': 'Search file patterns',
    'find': 'Search for files',
    'ps': 'Show process status',
    'kill': 'Terminate processes',
    'chmod': 'Change file permissions',
    'chown': 'Change file owner/group',
    'sudo': 'Execute command as superuser',
    'apt': 'Package management',
    'git': 'Version control system',
    'ssh': 'Secure shell client',
    'scp': 'Secure copy',
}

# Extra names the fuzzy matcher should recognise as already correct
EXTRA_VOCABULARY = (
    'pwd', 'echo', 'touch', 'less', 'head', 'tail', 'man', 'which', 'top',
    'htop', 'tar', 'curl', 'wget', 'ping', 'docker', 'npm', 'yarn', 'node',
    'python', 'python3', 'pip', 'make', 'vim', 'nano', 'export', 'source',
    'history', 'clear', 'exit', 'df', 'du', 'free', 'sort', 'uniq', 'wc',
    'xargs', 'sed', 'awk', 'diff', 'env', 'alias', 'pkill', 'brew', 'cargo',
)

KNOWN_COMMANDS = tuple(BASIC_COMMANDS) + EXTRA_VOCABULARY

OFFLINE_FLAGS: Dict[str, Dict[str, str]] = {
    'ls': {
        '-l': 'Long listing format',
        '-a': 'Include hidden files',
        '-h': 'Human readable sizes',
        '-t': 'Sort by modification time',
        '-R': 'List subdirectories recursively',
    },
    'grep': {
        '-i': 'Case-insensitive search',
        '-r': 'Recursive search',
        '-n': 'Print line numbers',
        '-v': 'Invert match',
        '-l': 'Print only names of matching files',
    },
    'rm': {
        '-r': 'Remove directories recursively',
        '-f': 'Never prompt',
        '-i': 'Prompt before every removal',
    },
    'cp': {
        '-r': 'Copy directories recursively',
        '-i': 'Prompt before overwrite',
        '-v': 'Explain what is being done',
    },
    'mkdir': {
        '-p': 'Create parent directories as needed',
        '-v': 'Print a message for each created directory',
    },
    'ps': {
        '-e': 'Select all processes',
        '-f': 'Full-format listing',
        '-u': 'Select by effective user',
    },
}

# Subcommands and flags offered by the completion service
COMMON_FLAGS: Dict[str, Dict[str, str]] = {
    'ls': {
        '-a': 'Show all files (including hidden)',
        '-l': 'Use long listing format',
        '-h': 'Human-readable file sizes',
        '--help': 'Display help information',
        '-R': 'List subdirectories recursively',
        '-S': 'Sort by file size',
        '-t': 'Sort by modification time',
        '-r': 'Reverse order while sorting',
        '-1': 'List one file per line',
    },
    'git': {
        'add': 'Add files to staging area',
        'commit': 'Commit staged changes',
        'push': 'Push commits to remote',
        'pull': 'Pull changes from remote',
        'checkout': 'Switch branches',
        'switch': 'Switch branches',
        'branch': 'List or create branches',
        'status': 'Show working tree status',
        'log': 'Show commit logs',
        'fetch': 'Download objects and refs from remote',
        'merge': 'Join two or more development histories',
        'rebase': 'Reapply commits on top of another base',
        'reset': 'Reset current HEAD to specified state',
        'stash': 'Stash changes in working directory',
        'tag': 'Create, list, delete, or verify tags',
        'clone': 'Clone a repository into a new directory',
        'diff': 'Show changes between commits and working tree',
        'remote': 'Manage remote repositories',
        'config': 'Get and set repository or global options',
    },
    'npm': {
        'install': 'Install a package',
        'i': 'Shorthand for install',
        'uninstall': 'Remove a package',
        'run': 'Run a script defined in package.json',
        'start': 'Start a package',
        'test': 'Test a package',
        'publish': 'Publish a package',
        'update': 'Update packages',
        'list': 'List installed packages',
        'init': 'Create a package.json file',
        'audit': 'Run a security audit',
    },
    'yarn': {
        'add': 'Install a package',
        'remove': 'Remove a package',
        'install': 'Install all dependencies',
        'run': 'Run a script defined in package.json',
        'start': 'Start a package',
        'test': 'Test a package',
        'build': 'Build a package',
        'upgrade': 'Upgrade packages to their latest version',
    },
    'docker': {
        'run': 'Run a command in a new container',
        'ps': 'List containers',
        'build': 'Build an image from a Dockerfile',
        'pull': 'Pull an image or a repository',
        'push': 'Push an image or a repository',
        'images': 'List images',
        'exec': 'Run a command in a running container',
        'logs': 'Fetch the logs of a container',
        'stop': 'Stop one or more running containers',
        'compose': 'Docker Compose (multi-container) commands',
    },
    'find': {
        '-name': 'Search for files by name',
        '-type': 'Search for files by type',
        '-size': 'Search for files by size',
        '-mtime': 'Search for files by modification time',
        '-exec': 'Execute a command on found files',
        '-maxdepth': 'Limit directory traversal depth',
    },
    'grep': {
        '-i': 'Case-insensitive search',
        '-r': 'Recursive search',
        '-v': 'Invert match (select non-matching lines)',
        '-n': 'Print line numbers',
        '-l': 'Print only names of files containing matches',
        '-c': 'Print only count of matching lines',
        '-E': 'Extended regular expressions',
    },
}

GIT_SUBCOMMAND_FLAGS: Dict[str, Dict[str, str]] = {
    'commit': {
        '-m': 'Commit message',
        '-a': 'Automatically stage all modified files',
        '--amend': 'Amend previous commit',
        '--no-edit': 'Use previous commit message',
    },
    'push': {
        '-u': 'Set upstream for current branch',
        '--force-with-lease': 'Force push if remote is unchanged',
        '--tags': 'Push tags',
        '--dry-run': 'Simulate push',
    },
    'pull': {
        '--rebase': 'Rebase instead of merge',
        '--no-rebase': 'Merge instead of rebase',
    },
    'checkout': {
        '-b': 'Create and checkout a new branch',
        '-t': 'Track a remote branch',
    },
}

OFFLINE_EXPLANATIONS: Dict[str, str] = {
    'ls': 'List directory contents. Shows files and folders in the current directory.',
    'cd': 'Change directory. Moves you to a different directory in the filesystem.',
    'pwd': 'Print working directory. Shows your current location in the filesystem.',
    'mkdir': 'Make directory. Creates a new directory with the specified name.',
    'rm': 'Remove files or directories. Permanently deletes specified items.',
    'cp': 'Copy files and directories from one location to another.',
    'mv': 'Move or rename files and directories.',
    'cat': 'Display contents of a file.',
    'grep': 'Search for patterns in files or command output.',
    'find': 'Search for files in a directory hierarchy.',
    'chmod': 'Change file mode (permissions).',
    'chown': 'Change file owner and group.',
    'sudo': 'Execute a command with superuser privileges.',
    'ssh': 'Secure shell client for remote system access.',
    'git': 'Version control system for tracking changes in files.',
    'docker': 'Platform for developing and running containers.',
    'npm': 'Node.js package manager for installing JavaScript packages.',
    'yarn': 'Alternative package manager for Node.js.',
    'ping': 'Test network connectivity to a host.',
    'curl': 'Transfer data from or to a server.',
    'wget': 'Download files from the web.',
}

OFFLINE_SCORE = 0.6
OFFLINE_LIMIT = 5


def get_offline_explanation(command: str) -> str:
    """Static explanation keyed by command name."""
    return OFFLINE_EXPLANATIONS.get(command, f'No offline explanation available for "{command}".')


def replace_last_word(command: str, replacement: str) -> str:
    words = command.split(' ')
    words[-1] = replacement
    return ' '.join(words)


def offline_suggestions(command: str) -> List[CompletionSuggestion]:
    """
    Complete the last word from the basic-command and flag tables.

    Returns at most five suggestions, command names before flags.
    """
    suggestions: List[CompletionSuggestion] = []
    words = command.strip().split(' ')
    last_word = command.split(' ')[-1]
    if not last_word:
        return suggestions

    for name, description in BASIC_COMMANDS.items():
        if name.startswith(last_word) and name != last_word:
            suggestions.append(CompletionSuggestion(
                command=replace_last_word(command, name),
                description=description,
                source=SuggestionSource.OFFLINE,
                score=OFFLINE_SCORE,
                replacement=name,
            ))

    flags = OFFLINE_FLAGS.get(words[0], {})
    if last_word.startswith('-'):
        for flag, description in flags.items():
            if flag.startswith(last_word) and flag != last_word:
                suggestions.append(CompletionSuggestion(
                    command=replace_last_word(command, flag),
                    description=description,
                    source=SuggestionSource.OFFLINE,
                    score=OFFLINE_SCORE,
                    replacement=flag,
                ))

    return suggestions[:OFFLINE_LIMIT]

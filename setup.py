#!/usr/bin/env python3
from __future__ import annotations

import re
import os
import setuptools
import pathlib

__minver__ = '3.8'
__github__ = 'https://github.com/vpdb/vptable/'
__gitraw__ = 'https://raw.githubusercontent.com/vpdb/vptable/'
__author__ = 'VPDB Contributors'
__slogan__ = 'Analysis and content deduplication of Visual Pinball table files.'
__topics__ = [
    'Development Status :: 3 - Alpha',
    'Operating System :: OS Independent',
    'Programming Language :: Python :: 3 :: Only',
    'Topic :: Games/Entertainment',
    'Topic :: System :: Archiving',
]

__requirements__ = [
    'olefile',
    'orjson',
]

__extras__ = {
    'test': ['pytest'],
}


def get_package_info() -> dict[str, str]:
    source = pathlib.Path(__file__).parent.joinpath('vptable', '__init__.py').read_text('utf8')
    return dict(re.findall(R"^__(\w+)__\s*=\s*'([^']*)'", source, re.MULTILINE))


def get_config():
    info = get_package_info()

    def get_setup_readme(filename: str | pathlib.Path | None = None):
        if filename is None:
            filename = pathlib.Path(__file__).parent.joinpath('README.md')
        if not os.path.exists(filename):
            return __slogan__
        with open(filename, 'r', encoding='UTF8') as README:
            def complete_link(match):
                link: str = match[1]
                if any(link.lower().endswith(xt) for xt in ('jpg', 'gif', 'png', 'svg')):
                    return F'({__gitraw__}master/{link})'
                else:
                    return F'({__github__}blob/master/{link})'
            readme = README.read()
            return re.sub(R'(?<=\])\((?!\w+://)(.*?)\)', complete_link, readme)

    def get_setup_common() -> dict:
        return dict(
            version=info['version'],
            long_description=get_setup_readme(),
            author=__author__,
            description=__slogan__,
            long_description_content_type='text/markdown',
            url=__github__,
            python_requires=F'>={__minver__}',
            classifiers=__topics__,
        )

    config = get_setup_common()
    config.update(
        name=info['distribution'],
        packages=setuptools.find_packages(include=('vptable*',)),
        install_requires=__requirements__,
        extras_require=__extras__,
        include_package_data=True,
    )
    return config


if __name__ == '__main__':
    setuptools.setup(**get_config())

#!/usr/bin/env python

# Copyright 2017 Canonical Ltd.
# Licensed under the LGPLv3, see LICENCE file for details.
from setuptools import (
    find_packages,
    setup,
)


PROJECT_NAME = 'macaroonchain'

# version 0.1.0
VERSION = (0, 1, 0)


def get_version():
    '''Return the macaroonchain version as a string.'''
    return '.'.join(map(str, VERSION))


requirements = [
    'PyNaCl>=1.4.0,<2.0',
    'pyRFC3339>=1.0,<3.0',
]

test_requirements = [
    'pytest',
    'pytz',
    'tox',
]

setup(
    name=PROJECT_NAME,
    version=get_version(),
    description='Macaroon bearer credentials: chained HMAC signatures, '
                'third party caveats and verification',
    long_description='Create, attenuate, serialize and verify macaroons.',
    author="Juju UI Team",
    author_email='juju-gui@lists.ubuntu.com',
    packages=find_packages(),
    include_package_data=True,
    install_requires=requirements,
    extras_require={'test': test_requirements},
    python_requires='>=3.6',
    license="LGPL3",
    zip_safe=False,
    keywords='macaroon authorization',
    classifiers=[
        'Development Status :: 2 - Pre-Alpha',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: GNU Lesser General Public License v3 (LGPLv3)',
        'Natural Language :: English',
        'Programming Language :: Python :: 3',
    ],
    test_suite='macaroonchain.tests',
)

from setuptools import setup


def get_install_requires():
    requires = [
        'requests',
    ]

    return requires


setup(
    name="xrpc",
    version="1.0.0",
    description=("xrpc is an XML-RPC codec: a value model, a parser and a"
                 " serializer for calls, responses, faults and multicall"
                 " batches, plus a small client and command-line tool."),
    license="LGPLv2",
    author='xrpc developers',
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: GNU Lesser General Public License v2 or later (LGPLv2+)",
        "Natural Language :: English",
        "Programming Language :: Python :: 3",
        "Topic :: Software Development :: Libraries",
    ],
    packages=['xrpc', 'xrpc_cli'],
    package_dir={
        'xrpc': 'xrpc',
        'xrpc_cli': 'cli/xrpc_cli',
    },
    scripts=[
        'cli/xrpc-call',
    ],
    python_requires='>=3.6',
    install_requires=get_install_requires(),
    extras_require={
        'test': ['mock', 'pytest'],
    },
)

from setuptools import setup

setup(
    name='atmfjstc-rpm-header',
    version='1.0.0',

    author_email='atmfjstc@protonmail.com',

    package_dir={'': 'src'},
    packages=['atmfjstc.lib.rpm_header'],

    install_requires=[
        'atmfjstc-binary-utils>=1.2, <2',
        'atmfjstc-ez-repr>=1.1, <2',
    ],

    extras_require={
        'test': [
            'pytest',
            'hypothesis',
        ],
    },

    zip_safe=True,

    description="Decoder for the Lead, Signature and Header sections of RPM package archives",

    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Typing :: Typed",
    ],
    python_requires='>=3.7',
)

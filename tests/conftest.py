"""Pytest fixtures for hsdef tests."""

import shutil
import textwrap
import pytest
from pathlib import Path
from tempfile import TemporaryDirectory

from loguru import logger


def dedent(text: str) -> str:
    """Dedent a sample and drop the leading/trailing blank lines."""
    return textwrap.dedent(text).strip("\n")


HAS_RIPGREP = shutil.which("rg") is not None

requires_ripgrep = pytest.mark.skipif(not HAS_RIPGREP, reason="ripgrep (rg) is not installed")


BASIC_SAMPLE = dedent("""
    module Sample where

    -- Data type definition
    data Foo = FooCon Int

    -- Type alias definition
    type FooAlias = Int

    -- Newtype definition
    newtype FooNew = FooNew Int

    -- Class definition
    class FooClass a where
      method1 :: a -> a
      method2 :: a -> Bool

    -- Function with type signature
    foo :: Int -> Int
    foo x = x + 1

    -- Function with value definition (no type signature)
    bar = 42

    -- Another function with type signature
    baz :: String -> String
    baz s = "Hello " ++ s

    -- Record type
    data Person = Person {
      name :: String,
      age :: Int
    }

    -- Instance definition
    instance Show Person where
      show (Person n a) = n ++ " (" ++ show a ++ ")"

    -- Type family
    type family FooFamily a :: *

    -- Data family
    data family FooDataFamily a

    -- GADT
    data FooGADT a where
      FooGADTCon :: a -> FooGADT a

    -- Pattern synonym
    pattern FooPattern :: Int -> Foo
    pattern FooPattern x = FooCon x

    -- Type synonym with constraints
    type FooWithConstraints a = (Show a, Eq a) => a -> String

    -- Function with multiple patterns
    quux :: Int -> String
    quux 0 = "zero"
    quux 1 = "one"
    quux _ = "other"

    -- Let binding
    letBinding = let x = 5 in x * 2

    -- Where clause
    whereBinding = result
      where
        result = 10

    -- Import statement
    import Data.Text (Text)

    -- Export statement
    module Exports (
      Foo(..),
      foo,
    )
""")


SIGNATURES_SAMPLE = dedent("""
    module Sample where

    oneLineSignature :: Int -> Int
    oneLineSignature x = x + 1

    colonsSameLine ::
      Int -> Int
    colonsSameLine x = x + 1

    colonsNextLine
      :: Int -> Int
    colonsNextLine x = x + 1

    aligned :: Int
            -> Int
    aligned x = x + 1

    multiline1 ::
      (Show a) =>
      a -> String
    multiline1 = undefined

    multiline2 ::
      (Show a) =>
      => a
      -> String
    multiline2 = undefined

    multiline3
      :: (Show a)
      => a -> String
    multiline3 = undefined

    indent1
     :: Int -> Int
    indent1 = undefined

    indent2
      :: Int -> Int
    indent2 = undefined

    indent3
       :: Int -> Int
    indent3 = undefined
""")


ADT_SAMPLE = dedent("""
    module Sample where

    -- Simple one-line ADT
    data Simple = SimpleCon Int

    -- ADT with constructors on one line
    data Multi = MultiCon1 Int | MultiCon2 String | MultiCon3

    -- ADT with constructors on separate lines
    data MultiSeparateLines =
      MultiSeparateLinesCon1 Int
      | MultiSeparateLinesCon2 String
      | MultiSeparateLinesCon3 Bool

    -- ADT with aligned constructors
    data Aligned =
        AlignedCon1 Int
      | AlignedCon2 String
      | AlignedCon3 Bool

    -- ADT with different indentation levels
    data Indented =
     IndentedCon1 Int
       | IndentedCon2 String
         | IndentedCon3 Bool

    -- ADT with constructors having multiple fields
    data MultiField =
      MultiFieldCon1 Int String Bool
      | MultiFieldCon2 { field1 :: Int, field2 :: String }
      | MultiFieldCon3 (Maybe Int) (Either String Bool)

    -- ADT with multiline constructor fields
    data MultilineFields =
      MultilineFieldsCon1
        Int
        String
        Bool
      | MultilineFieldsCon2
        { field1 :: Int
        , field2 :: String
        , field3 :: Bool
        }
      | MultilineFieldsCon3
        (Maybe Int)
        (Either String Bool)

    -- ADT with GADT syntax
    data GADT a where
      GADTCon1 :: a -> GADT a
      GADTCon2 :: (Show a) => a -> String -> GADT a

    -- ADT with record syntax
    data Record =
      RecordCon1 {
        field1 :: Int,
        field2 :: String
      }
      | RecordCon2 {
        field3 :: Bool,
        field4 :: Double,
        field5 :: Char
      }

    -- ADT with nested patterns
    data Nested =
      NestedCon1 (Maybe (Either Int String))
      | NestedCon2
        { nested1 :: Maybe Int
        , nested2 :: Either String Bool
        , nested3 :: [Int]
        }
""")


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def haskell_project(temp_dir):
    """Create a small Haskell project with definitions spread over files."""
    (temp_dir / "project.cabal").write_text("name: project\n")
    src = temp_dir / "src"
    (src / "Data").mkdir(parents=True)

    (src / "Main.hs").write_text(dedent("""
        module Main where

        import Data.Shape

        main :: IO ()
        main = print (area (Circle 1.0))
    """))
    (src / "Data" / "Shape.hs").write_text(dedent("""
        module Data.Shape where

        data Shape =
          Circle Double
          | Square Double

        area :: Shape -> Double
        area (Circle r) = pi * r * r
        area (Square s) = s * s

        unitSquare = Square 1.0
    """))
    (src / "Util.hs").write_text(dedent("""
        module Util where

        area = 0

        helper
          :: Int -> Int
        helper = id
    """))
    (src / "notes.txt").write_text("area :: not haskell\n")

    build = temp_dir / "dist-newstyle"
    build.mkdir()
    (build / "Generated.hs").write_text("area :: Generated\n")
    return temp_dir


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, temp_dir):
    """Clean environment variables that might affect tests."""
    env_vars = [
        "HSDEF_ENGINE",
        "HSDEF_RG_PATH",
        "HSDEF_SEARCH_TIMEOUT",
        "HSDEF_MAX_WORKERS",
        "HSDEF_DEBUG",
    ]
    for var in env_vars:
        monkeypatch.delenv(var, raising=False)
    # Keep the user's real ~/.hsdef/config.toml out of the tests
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("APPDATA", str(home))


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop loguru sinks added by the CLI during a test."""
    yield
    logger.remove()
